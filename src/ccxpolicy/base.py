"""
Host-facing interfaces.

The engine consumes ``Node`` and ``Policy`` during evaluation and
``Executor`` during enforcement. All three are implemented by host code;
the engine ships no runtime of its own.

Contract:
  - Node is a read-only view. ``params()`` may be a shallow copy.
  - Policy.matches must be cheap and free of side effects.
  - Executor performs the real effects and owns their failure handling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ccxpolicy.exceptions import Reason
from ccxpolicy.model import AdjustFn, Decision, Scope


class Node(ABC):
    """Read-only adapter over a host runtime element (task, context, step...)."""

    @abstractmethod
    def id(self) -> str:
        """Stable identifier used in diagnostics."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Semantic label that policies match on."""
        ...

    @abstractmethod
    def params(self) -> dict[str, Any]:
        """Current effective parameters."""
        ...

    @abstractmethod
    def parent(self) -> Node | None:
        """Logical parent, or None if this node is a root."""
        ...

    @abstractmethod
    def root(self) -> Node:
        """Root ancestor; a root returns itself."""
        ...


class Policy(ABC):
    """A prioritized rule that inspects nodes and emits decisions.

    Policies run in ascending ``priority()``. Keep ``matches`` a fast
    prefilter and put heavier inspection in ``check``.
    """

    @abstractmethod
    def id(self) -> str: ...

    @abstractmethod
    def priority(self) -> int: ...

    @abstractmethod
    def matches(self, node: Node) -> bool: ...

    @abstractmethod
    def check(self, node: Node) -> Sequence[Decision]: ...


class Executor(ABC):
    """Applies decisions inside the host runtime.

    Any state the executor touches (a parameter store, a task tree) is
    the host's to synchronise.
    """

    @abstractmethod
    def warn(self, policy_id: str, reason: Reason | None) -> None:
        """Record an advisory signal (logs, metrics, tracing)."""
        ...

    @abstractmethod
    def adjust(self, scope: Scope, fn: AdjustFn) -> None:
        """Apply a parameter mutation at ``scope``."""
        ...

    @abstractmethod
    def cancel(self, scope: Scope, reason: Reason | None) -> None:
        """Abort work at ``scope``."""
        ...
