"""
In-memory host adapters — a Node tree and executors that act on it.

These are reference hosts: they let the engine be exercised end-to-end
(CLI ``test --apply``, unit tests) without a real runtime.

    root = MemoryNode("job-1", "job")
    step = root.add_child("step-1", "transcode", {"quality": 1440})

    executor = MemoryExecutor(step)
    enforce(executor, evaluate(registry, step))
    executor.cancelled      # ids of cancelled nodes
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ccxpolicy.base import Executor, Node
from ccxpolicy.exceptions import Reason
from ccxpolicy.model import AdjustFn, Scope

logger = logging.getLogger(__name__)


class MemoryNode(Node):
    """A tree node holding its own parameter dict."""

    def __init__(
        self,
        node_id: str,
        name: str,
        params: Mapping[str, Any] | None = None,
        parent: MemoryNode | None = None,
    ) -> None:
        self._id = node_id
        self._name = name
        self._params: dict[str, Any] = dict(params or {})
        self._parent = parent
        self.children: list[MemoryNode] = []
        # One lock per tree: children share the lock created by their root.
        self._lock: threading.Lock = parent._lock if parent is not None else threading.Lock()
        if parent is not None:
            parent.children.append(self)

    def add_child(
        self, node_id: str, name: str, params: Mapping[str, Any] | None = None
    ) -> MemoryNode:
        return MemoryNode(node_id, name, params, parent=self)

    def id(self) -> str:
        return self._id

    def name(self) -> str:
        return self._name

    def params(self) -> dict[str, Any]:
        # Shallow copy: policies must not reach the live dict.
        return dict(self._params)

    def parent(self) -> MemoryNode | None:
        return self._parent

    def root(self) -> MemoryNode:
        cur = self
        while cur._parent is not None:
            cur = cur._parent
        return cur

    def walk(self) -> Iterator[MemoryNode]:
        """Yield this node then every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __repr__(self) -> str:
        return f"MemoryNode(id={self._id!r}, name={self._name!r})"


class MemoryExecutor(Executor):
    """
    Applies decisions to a MemoryNode tree.

    Scopes resolve relative to ``target``: NODE is the target, SUBTREE is
    the target plus descendants, ROOT is the tree root. Adjust and cancel
    hold the lock owned by the tree, so executors aimed at different
    nodes of the same tree never interleave inside one adjust.
    """

    def __init__(self, target: MemoryNode) -> None:
        self.target = target
        self.warnings: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    def _resolve(self, scope: Scope) -> list[MemoryNode]:
        if scope == Scope.SUBTREE:
            return list(self.target.walk())
        if scope == Scope.ROOT:
            return [self.target.root()]
        return [self.target]

    def warn(self, policy_id: str, reason: Reason | None) -> None:
        message = str(reason) if reason is not None else ""
        self.warnings.append((policy_id, message))
        logger.warning("Policy %s warned on %s: %s", policy_id, self.target.id(), message)

    def adjust(self, scope: Scope, fn: AdjustFn) -> None:
        nodes = self._resolve(scope)
        with self.target._lock:
            for node in nodes:
                fn(node._params)
        logger.info(
            "Adjusted params at scope=%s on %s", scope.name.lower(), [n.id() for n in nodes]
        )

    def cancel(self, scope: Scope, reason: Reason | None) -> None:
        nodes = self._resolve(scope)
        with self.target._lock:
            for node in nodes:
                if node.id() not in self.cancelled:
                    self.cancelled.append(node.id())
        logger.warning(
            "Cancelled %s at scope=%s: %s",
            [n.id() for n in nodes],
            scope.name.lower(),
            reason,
        )


@dataclass
class ExecutorCall:
    """One recorded executor invocation."""

    op: str
    scope: Scope | None = None
    policy_id: str | None = None
    reason: Reason | None = None
    fn: AdjustFn | None = None


class RecordingExecutor(Executor):
    """Records every call without applying anything (dry run)."""

    def __init__(self) -> None:
        self.calls: list[ExecutorCall] = []

    def warn(self, policy_id: str, reason: Reason | None) -> None:
        self.calls.append(ExecutorCall(op="warn", policy_id=policy_id, reason=reason))

    def adjust(self, scope: Scope, fn: AdjustFn) -> None:
        self.calls.append(ExecutorCall(op="adjust", scope=scope, fn=fn))

    def cancel(self, scope: Scope, reason: Reason | None) -> None:
        self.calls.append(ExecutorCall(op="cancel", scope=scope, reason=reason))

    @property
    def ops(self) -> list[str]:
        return [call.op for call in self.calls]


class LoggingExecutor(Executor):
    """Logs each call; useful as an audit-only executor."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def warn(self, policy_id: str, reason: Reason | None) -> None:
        self.log.warning("warn: policy=%s reason=%s", policy_id, reason)

    def adjust(self, scope: Scope, fn: AdjustFn) -> None:
        self.log.info("adjust: scope=%s fn=%r", scope.name.lower(), fn)

    def cancel(self, scope: Scope, reason: Reason | None) -> None:
        self.log.warning("cancel: scope=%s reason=%s", scope.name.lower(), reason)
