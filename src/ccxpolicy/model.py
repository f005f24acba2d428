"""
Decision model — the value types exchanged between policies, the
evaluation engine, and the host executor.

Usage::

    from ccxpolicy.model import Action, Decision, Scope, reason

    d = Decision(
        policy_id="cap-quality",
        scope=Scope.NODE,
        action=Action.ADJUST,
        adjust=lambda params: params.update(quality=1080),
        reason=reason("quality above cap"),
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, TypeVar

from ccxpolicy.exceptions import Reason

# Mutates a parameter mapping in place; must not keep a reference to it.
AdjustFn = Callable[[dict[str, Any]], None]

T = TypeVar("T")


class Scope(IntEnum):
    """Breadth of an effect. The host decides what descendants and root mean."""

    NODE = 0
    SUBTREE = 1
    ROOT = 2


class Action(IntEnum):
    """Which executor operation a decision maps to."""

    NOOP = 0
    WARN = 1
    ADJUST = 2
    CANCEL_NODE = 3
    CANCEL_SUBTREE = 4
    CANCEL_ROOT = 5

    @property
    def is_cancel(self) -> bool:
        return self in (Action.CANCEL_NODE, Action.CANCEL_SUBTREE, Action.CANCEL_ROOT)


CANCEL_SCOPES: dict[Action, Scope] = {
    Action.CANCEL_NODE: Scope.NODE,
    Action.CANCEL_SUBTREE: Scope.SUBTREE,
    Action.CANCEL_ROOT: Scope.ROOT,
}

_CANCEL_ACTIONS = {scope: action for action, scope in CANCEL_SCOPES.items()}


def reason(message: str) -> Reason:
    """Wrap a message into a Reason for use as ``Decision.reason``."""
    return Reason(message)


@dataclass(frozen=True)
class Decision:
    """
    One unit of output from ``Policy.check``.

    ``adjust`` is only consulted when ``action`` is ADJUST. ``stop`` ends
    evaluation (no lower-priority policy runs) and, independently, ends
    enforcement after this decision is applied.
    """

    policy_id: str
    scope: Scope = Scope.NODE
    action: Action = Action.NOOP
    adjust: AdjustFn | None = None
    reason: Reason | None = None
    stop: bool = False

    @classmethod
    def warn(cls, policy_id: str, message: str, *, stop: bool = False) -> Decision:
        return cls(policy_id=policy_id, action=Action.WARN, reason=reason(message), stop=stop)

    @classmethod
    def adjust_params(
        cls,
        policy_id: str,
        fn: AdjustFn,
        *,
        scope: Scope = Scope.NODE,
        message: str | None = None,
        stop: bool = False,
    ) -> Decision:
        return cls(
            policy_id=policy_id,
            scope=scope,
            action=Action.ADJUST,
            adjust=fn,
            reason=reason(message) if message else None,
            stop=stop,
        )

    @classmethod
    def cancel(
        cls,
        policy_id: str,
        message: str,
        *,
        scope: Scope = Scope.NODE,
        stop: bool = False,
    ) -> Decision:
        """Build a cancel decision whose action matches ``scope``."""
        return cls(
            policy_id=policy_id,
            scope=scope,
            action=_CANCEL_ACTIONS[scope],
            reason=reason(message),
            stop=stop,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe summary. The adjust callable is reported as present/absent."""
        return {
            "policy_id": self.policy_id,
            "scope": self.scope.name.lower(),
            "action": self.action.name.lower(),
            "has_adjust": self.adjust is not None,
            "reason": str(self.reason) if self.reason is not None else None,
            "stop": self.stop,
        }


# ---------------------------------------------------------------------------
# Defensive parameter accessors
# ---------------------------------------------------------------------------


def _typed(params: Mapping[str, Any], key: str, types: tuple[type, ...], default: T) -> T:
    value = params.get(key, default)
    # bool is an int subclass; never let True pass for a number
    if isinstance(value, bool) and bool not in types:
        return default
    if not isinstance(value, types):
        return default
    return value  # type: ignore[return-value]


def param_str(params: Mapping[str, Any], key: str, default: str = "") -> str:
    return _typed(params, key, (str,), default)


def param_int(params: Mapping[str, Any], key: str, default: int = 0) -> int:
    return _typed(params, key, (int,), default)


def param_float(params: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    """Read a number as float; ints are widened."""
    value = _typed(params, key, (int, float), default)
    return float(value)


def param_bool(params: Mapping[str, Any], key: str, default: bool = False) -> bool:
    return _typed(params, key, (bool,), default)
