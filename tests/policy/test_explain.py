"""Tests for ccxpolicy.explain — format_decision() and explain_evaluation()."""

from __future__ import annotations

from pathlib import Path

from ccxpolicy.explain import explain_evaluation, format_decision
from ccxpolicy.loader import SetParams, load_into
from ccxpolicy.memory import MemoryNode
from ccxpolicy.model import Action, Decision, Scope
from ccxpolicy.registry import PolicyRegistry
from tests.fakes import StaticPolicy

_FIXTURES = Path(__file__).parent / "fixtures"


def _registry() -> PolicyRegistry:
    registry = PolicyRegistry()
    load_into(registry, [_FIXTURES / "basic.yaml"])
    return registry


class TestFormatDecision:
    def test_warn(self) -> None:
        line = format_decision(Decision.warn("W", "careful"))
        assert line.startswith("warn")
        assert "policy=W" in line
        assert "reason='careful'" in line
        assert "STOP" not in line

    def test_adjust_shows_function(self) -> None:
        d = Decision(
            policy_id="A",
            action=Action.ADJUST,
            scope=Scope.SUBTREE,
            adjust=SetParams({"q": 1}),
        )
        line = format_decision(d)
        assert "scope=subtree" in line
        assert "adjust=SetParams({'q': 1})" in line

    def test_stop_marker(self) -> None:
        assert format_decision(Decision.cancel("C", "x", stop=True)).endswith("STOP")


class TestExplainEvaluation:
    def test_empty_registry(self) -> None:
        out = explain_evaluation(PolicyRegistry(), MemoryNode("n", "x"))
        assert "Policies: 0" in out
        assert "(registry is empty)" in out

    def test_match_and_skip(self) -> None:
        node = MemoryNode("step", "transcode", {"codec": "h264", "quality": 1440})
        out = explain_evaluation(_registry(), node)
        lines = out.splitlines()
        assert lines[0] == "Node:     'step'  (name='transcode')"
        assert any("'block-huge'" in ln and "[skip]" in ln for ln in lines)
        assert any("'cap-quality'" in ln and "[MATCH]" in ln for ln in lines)
        assert any("'audit'" in ln and "[MATCH]" in ln for ln in lines)
        assert "Remaining policies not evaluated" not in out

    def test_stop_reported(self) -> None:
        node = MemoryNode("step", "transcode", {"size": "huge"})
        out = explain_evaluation(_registry(), node)
        assert "Remaining policies not evaluated — stop; 2 skipped" in out
        assert "'audit'" not in out

    def test_no_decisions_noted(self) -> None:
        registry = PolicyRegistry()
        from ccxpolicy.loader import parse_policies

        for policy in parse_policies("policies:\n  - id: silent\n"):
            registry.register(policy)
        out = explain_evaluation(registry, MemoryNode("n", "x"))
        assert "(no decisions)" in out

    def test_priority_shown_is_the_registered_one(self) -> None:
        registry = PolicyRegistry()
        first = StaticPolicy("first", 1, [Decision.warn("first", "hi")])
        registry.register(first)
        registry.register(StaticPolicy("second", 5))
        first._priority = 50
        lines = explain_evaluation(registry, MemoryNode("n", "x")).splitlines()
        match_lines = [ln for ln in lines if "[MATCH]" in ln]
        assert "'first'" in match_lines[0] and match_lines[0].endswith("priority=1")
        assert "'second'" in match_lines[1] and match_lines[1].endswith("priority=5")
