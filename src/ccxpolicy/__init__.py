"""
ccxpolicy — a minimal, host-agnostic policy engine.

Policies inspect a read-only Node view and emit Decisions (warn, adjust
parameters, cancel at a scope). The host applies them through an
Executor.

Public API::

    from ccxpolicy import PolicyRegistry, evaluate, enforce

    registry = PolicyRegistry()
    registry.register(MyPolicy())
    enforce(my_executor, evaluate(registry, my_node))

Package layout (src/ccxpolicy/):
  model       — Scope, Action, Decision, reason()
  base        — Node / Policy / Executor interfaces
  registry    — PolicyRegistry
  engine      — evaluate(), enforce(), PolicyEngine
  memory      — in-memory Node tree and executors
  loader      — YAML declarative policies
  explain     — evaluation trace rendering
  config      — Pydantic config, TOML load
  cli/        — Click CLI entry point
"""

from ccxpolicy.base import Executor, Node, Policy
from ccxpolicy.engine import PolicyEngine, enforce, evaluate
from ccxpolicy.exceptions import Reason
from ccxpolicy.model import AdjustFn, Action, Decision, Scope, reason
from ccxpolicy.registry import PolicyRegistry

__version__ = "0.1.0"
__all__ = [
    "Action",
    "AdjustFn",
    "Decision",
    "Executor",
    "Node",
    "Policy",
    "PolicyEngine",
    "PolicyRegistry",
    "Reason",
    "Scope",
    "__version__",
    "enforce",
    "evaluate",
    "reason",
]
