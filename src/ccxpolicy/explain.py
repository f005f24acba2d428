"""
Evaluation explain — human-readable trace for ``ccxpolicy test --explain``.

Usage::

    print(explain_evaluation(registry, node))
"""

from __future__ import annotations

from ccxpolicy.base import Node
from ccxpolicy.model import Decision
from ccxpolicy.registry import PolicyRegistry


def format_decision(decision: Decision) -> str:
    """Render a decision on one line."""
    parts = [
        f"{decision.action.name.lower():<15s}",
        f"scope={decision.scope.name.lower()}",
        f"policy={decision.policy_id}",
    ]
    if decision.adjust is not None:
        parts.append(f"adjust={decision.adjust!r}")
    if decision.reason is not None:
        parts.append(f"reason={str(decision.reason)!r}")
    if decision.stop:
        parts.append("STOP")
    return "  ".join(parts)


def explain_evaluation(registry: PolicyRegistry, node: Node) -> str:
    """
    Walk the registry in priority order and show which policies matched
    and what they emitted, up to the first stop.

    Makes the same match/check calls as :func:`ccxpolicy.engine.evaluate`.
    Priorities shown are the ones the registry ordered by, read at
    registration.
    """
    entries = registry.entries()
    lines: list[str] = []
    lines.append(f"Node:     {node.id()!r}  (name={node.name()!r})")
    lines.append(f"Policies: {len(entries)}")
    lines.append("")

    for index, (priority, policy) in enumerate(entries):
        if not policy.matches(node):
            lines.append(f"  {policy.id()!r:40s} [skip]   priority={priority}")
            continue
        lines.append(f"  {policy.id()!r:40s} [MATCH]  priority={priority}")
        decisions = policy.check(node)
        if not decisions:
            lines.append("      (no decisions)")
        for decision in decisions:
            lines.append(f"      → {format_decision(decision)}")
            if decision.stop:
                remaining = len(entries) - index - 1
                lines.append("")
                lines.append(f"  (Remaining policies not evaluated — stop; {remaining} skipped)")
                return "\n".join(lines)

    if not entries:
        lines.append("  (registry is empty)")
    return "\n".join(lines)
