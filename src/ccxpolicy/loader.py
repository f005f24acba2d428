"""
Declarative policy loader — YAML files of literal-match policies.

This is a host-side adapter, not a rule language: a policy matches on a
node name and literal parameter values, and emits a fixed list of
decisions.

Usage::

    policies = load_policies("policies.yaml")
    count = load_into(registry, ["policies.yaml", "extra.yaml"])

File shape::

    policies:
      - id: cap-quality
        priority: 10
        match:
          name: transcode
          params: {codec: h264}
          has_params: [quality]
        decisions:
          - action: adjust
            set: {quality: 1080}
            reason: quality above cap
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ccxpolicy.base import Node, Policy
from ccxpolicy.exceptions import PolicyParseError
from ccxpolicy.model import CANCEL_SCOPES, Action, Decision, Scope, reason
from ccxpolicy.registry import PolicyRegistry

logger = logging.getLogger(__name__)

ActionName = Literal["noop", "warn", "adjust", "cancel_node", "cancel_subtree", "cancel_root"]
ScopeName = Literal["node", "subtree", "root"]


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class MatchSpec(BaseModel):
    """Literal match criteria. Every given criterion must hold."""

    model_config = ConfigDict(extra="forbid")

    name: str = "*"
    params: dict[str, Any] = Field(default_factory=dict)
    has_params: list[str] = Field(default_factory=list)


class DecisionSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    action: ActionName
    scope: ScopeName | None = None
    set_params: dict[str, Any] | None = Field(default=None, alias="set")
    reason: str | None = None
    stop: bool = False

    @model_validator(mode="after")
    def set_only_with_adjust(self) -> DecisionSpec:
        if self.action == "adjust" and not self.set_params:
            raise ValueError("'set' is required when action is 'adjust'")
        if self.action != "adjust" and self.set_params is not None:
            raise ValueError(f"'set' is only allowed with action 'adjust' (got {self.action!r})")
        return self


class PolicySpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    priority: int = 0
    description: str | None = None
    match: MatchSpec = Field(default_factory=MatchSpec)
    decisions: list[DecisionSpec] = Field(default_factory=list)


class PolicyFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    policies: list[PolicySpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_ids(self) -> PolicyFile:
        seen: set[str] = set()
        for spec in self.policies:
            if spec.id in seen:
                raise ValueError(f"duplicate policy id {spec.id!r}")
            seen.add(spec.id)
        return self


# ---------------------------------------------------------------------------
# Runtime policy
# ---------------------------------------------------------------------------


class SetParams:
    """Adjust function that writes literal values into a parameter map."""

    __slots__ = ("values",)

    def __init__(self, values: dict[str, Any]) -> None:
        self.values = values

    def __call__(self, params: dict[str, Any]) -> None:
        params.update(copy.deepcopy(self.values))

    def __repr__(self) -> str:
        return f"SetParams({self.values!r})"


def _literal_equal(actual: Any, expected: Any) -> bool:
    """
    Compare a node parameter with a literal from a policy file.

    bool never equals int or float (``True`` does not match ``1``); int and
    float compare by value, so ``1`` matches ``1.0``. Lists and mappings
    compare element by element under the same rules.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(expected, (int, float)) and isinstance(actual, (int, float)):
        return actual == expected
    if isinstance(expected, list):
        return (
            isinstance(actual, (list, tuple))
            and len(actual) == len(expected)
            and all(_literal_equal(a, e) for a, e in zip(actual, expected))
        )
    if isinstance(expected, dict):
        return (
            isinstance(actual, Mapping)
            and actual.keys() == expected.keys()
            and all(_literal_equal(actual[k], v) for k, v in expected.items())
        )
    return actual == expected


def _build_decision(policy_id: str, spec: DecisionSpec) -> Decision:
    action = Action[spec.action.upper()]
    if spec.scope is not None:
        scope = Scope[spec.scope.upper()]
    else:
        scope = CANCEL_SCOPES.get(action, Scope.NODE)
    return Decision(
        policy_id=policy_id,
        scope=scope,
        action=action,
        adjust=SetParams(spec.set_params) if spec.set_params is not None else None,
        reason=reason(spec.reason) if spec.reason is not None else None,
        stop=spec.stop,
    )


class DeclarativePolicy(Policy):
    """Policy backed by a validated :class:`PolicySpec`."""

    def __init__(self, spec: PolicySpec, source: str = "<string>") -> None:
        self.spec = spec
        self.source = source
        self._decisions = tuple(_build_decision(spec.id, d) for d in spec.decisions)

    def id(self) -> str:
        return self.spec.id

    def priority(self) -> int:
        return self.spec.priority

    def matches(self, node: Node) -> bool:
        m = self.spec.match
        if m.name != "*" and node.name() != m.name:
            return False
        if not m.params and not m.has_params:
            return True
        params = node.params()
        if any(key not in params for key in m.has_params):
            return False
        return all(
            key in params and _literal_equal(params[key], value) for key, value in m.params.items()
        )

    def check(self, node: Node) -> list[Decision]:
        return list(self._decisions)

    def __repr__(self) -> str:
        return f"DeclarativePolicy(id={self.spec.id!r}, priority={self.spec.priority})"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_policies(yaml_text: str, source: str = "<string>") -> list[DeclarativePolicy]:
    """
    Parse and validate a YAML policy document.

    Raises:
        PolicyParseError: on YAML syntax errors or schema violations.
    """
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise PolicyParseError(f"YAML syntax error in {source}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PolicyParseError(
            f"Policy file {source} must be a YAML mapping (got {type(data).__name__})"
        )

    try:
        parsed = PolicyFile.model_validate(data)
    except ValidationError as exc:
        lines = [f"Policy validation failed in {source}:"]
        for err in exc.errors():
            loc = " → ".join(str(x) for x in err["loc"]) if err["loc"] else "(root)"
            lines.append(f"  {loc}: {err['msg']}")
        raise PolicyParseError("\n".join(lines)) from exc

    return [DeclarativePolicy(spec, source=source) for spec in parsed.policies]


def load_policies(path: str | Path) -> list[DeclarativePolicy]:
    """
    Load and validate policies from a YAML file.

    Raises:
        PolicyParseError: if the file is missing, unreadable, or invalid.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise PolicyParseError(f"Policy file not found: {p}")
    try:
        content = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise PolicyParseError(f"Cannot read policy file {p}: {exc}") from exc
    return parse_policies(content, source=str(p))


def load_into(registry: PolicyRegistry, paths: Iterable[str | Path]) -> int:
    """Register every policy from each file. Returns how many were registered."""
    count = 0
    for path in paths:
        policies: Sequence[DeclarativePolicy] = load_policies(path)
        for policy in policies:
            registry.register(policy)
        count += len(policies)
        logger.info("Loaded %d policies from %s", len(policies), path)
    return count


def validate_policy_file(path: str | Path) -> list[str]:
    """Return human-readable error lines; empty if the file is valid."""
    try:
        load_policies(path)
        return []
    except PolicyParseError as exc:
        return str(exc).splitlines()
