"""
Policy engine — evaluation and enforcement.

Usage::

    decisions = evaluate(registry, node)
    enforce(executor, decisions)

Evaluation is a pure query over a registry snapshot: it calls
``matches``/``check`` on each policy and never touches the executor.
Enforcement replays the decisions against the executor in order. Both
stop right after the first decision whose ``stop`` flag is set.

Exceptions raised by host callbacks (Node, Policy, Executor) propagate
to the caller unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ccxpolicy.base import Executor, Node, Policy
from ccxpolicy.model import CANCEL_SCOPES, Action, Decision
from ccxpolicy.registry import PolicyRegistry

logger = logging.getLogger(__name__)


def evaluate(registry: PolicyRegistry, node: Node) -> list[Decision]:
    """
    Run every matching policy in ascending priority and collect decisions.

    Args:
        registry: Registry to snapshot; later registrations do not affect
                  an evaluation already in progress.
        node:     Read-only view of the element under inspection.

    Returns:
        Decisions in the order they should be enforced. Empty when the
        registry is empty or nothing matched.
    """
    out: list[Decision] = []
    for policy in registry.snapshot():
        if not policy.matches(node):
            continue
        for decision in policy.check(node):
            out.append(decision)
            if decision.stop:
                logger.debug("Evaluation stopped by policy %s", decision.policy_id)
                return out
    return out


def enforce(executor: Executor, decisions: Iterable[Decision]) -> None:
    """
    Apply decisions to the executor, strictly in order.

    Mapping of actions:
      - NOOP:            no effect
      - WARN:            executor.warn(policy_id, reason)
      - ADJUST:          executor.adjust(scope, adjust), skipped if adjust is None
      - CANCEL_NODE:     executor.cancel(Scope.NODE, reason)
      - CANCEL_SUBTREE:  executor.cancel(Scope.SUBTREE, reason)
      - CANCEL_ROOT:     executor.cancel(Scope.ROOT, reason)

    For cancels the action picks the scope; ``decision.scope`` is ignored.
    """
    for decision in decisions:
        action = decision.action
        if action == Action.WARN:
            executor.warn(decision.policy_id, decision.reason)
        elif action == Action.ADJUST:
            if decision.adjust is not None:
                executor.adjust(decision.scope, decision.adjust)
        elif action in CANCEL_SCOPES:
            executor.cancel(CANCEL_SCOPES[action], decision.reason)
        if decision.stop:
            logger.debug("Enforcement stopped after decision from %s", decision.policy_id)
            return


class PolicyEngine:
    """
    Service object that threads one registry through host code.

    Parameters
    ----------
    registry:
        Registry to evaluate against. A fresh one is created if omitted.
    """

    def __init__(self, registry: PolicyRegistry | None = None) -> None:
        self.registry = registry if registry is not None else PolicyRegistry()

    def register(self, *policies: Policy) -> None:
        for policy in policies:
            self.registry.register(policy)

    def evaluate(self, node: Node) -> list[Decision]:
        return evaluate(self.registry, node)

    def enforce(self, executor: Executor, decisions: Iterable[Decision]) -> None:
        enforce(executor, decisions)

    def run(self, node: Node, executor: Executor) -> list[Decision]:
        """Evaluate ``node`` then enforce the result. Returns the decisions."""
        decisions = self.evaluate(node)
        self.enforce(executor, decisions)
        return decisions
