"""
Policy registry — an explicit, thread-safe, priority-ordered collection.

Usage::

    registry = PolicyRegistry()
    registry.register(CapQuality())
    for policy in registry.snapshot():
        ...

Policies are kept sorted by ascending ``priority()``. Equal priorities
keep insertion order. There is no removal; to reload, build a new
registry and swap the handle.
"""

from __future__ import annotations

import logging
import threading

from ccxpolicy.base import Policy

logger = logging.getLogger(__name__)


class PolicyRegistry:
    """
    Ordered set of Policy references.

    ``priority()`` is read once, at registration. The lock is held only
    while appending+sorting and while copying the list out; no policy
    callback runs under it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[tuple[int, Policy]] = []

    def register(self, policy: Policy) -> None:
        """Add a policy and restore priority order."""
        priority = policy.priority()
        with self._lock:
            entries = self._entries + [(priority, policy)]
            # list.sort is stable: equal priorities stay in insertion order
            entries.sort(key=lambda entry: entry[0])
            self._entries = entries
            count = len(entries)
        logger.debug("Registered policy %s (priority=%d, total=%d)", policy.id(), priority, count)

    def snapshot(self) -> tuple[Policy, ...]:
        """Return a point-in-time copy of the ordered policy list."""
        with self._lock:
            entries = self._entries
        return tuple(policy for _, policy in entries)

    def entries(self) -> tuple[tuple[int, Policy], ...]:
        """Like :meth:`snapshot`, paired with the priority each policy is ordered by."""
        with self._lock:
            entries = self._entries
        return tuple(entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"PolicyRegistry(policies={len(self)})"
