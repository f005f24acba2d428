"""ccxpolicy validate / test — declarative policy commands."""

from __future__ import annotations

import json
import sys
from typing import Any

import click
import yaml
from rich.console import Console

from ccxpolicy.config import CcxPolicyConfig
from ccxpolicy.constants import ExitCode
from ccxpolicy.engine import enforce, evaluate
from ccxpolicy.exceptions import PolicyParseError
from ccxpolicy.explain import explain_evaluation, format_decision
from ccxpolicy.loader import load_into, load_policies
from ccxpolicy.memory import MemoryExecutor, MemoryNode
from ccxpolicy.registry import PolicyRegistry


def cmd_validate(policy_files: tuple[str, ...]) -> None:
    failed = False
    for path in policy_files:
        try:
            policies = load_policies(path)
        except PolicyParseError as exc:
            failed = True
            click.echo(f"✗  {path}", err=True)
            click.echo(str(exc), err=True)
            continue
        click.echo(f"✓  {path} is valid ({len(policies)} policies)")
    if failed:
        sys.exit(ExitCode.ERROR)


def parse_param(raw: str) -> tuple[str, Any]:
    """Split ``KEY=VALUE``; VALUE is read as a YAML scalar."""
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise click.BadParameter(f"expected KEY=VALUE, got {raw!r}", param_hint="--param")
    try:
        return key, yaml.safe_load(value) if value else ""
    except yaml.YAMLError:
        return key, value


def cmd_test(
    config: CcxPolicyConfig,
    policy_files: tuple[str, ...],
    node_name: str,
    node_id: str,
    params: tuple[str, ...],
    explain: bool,
    apply_: bool,
    as_json: bool,
    err_console: Console,
) -> None:
    paths = list(policy_files) or [str(p) for p in config.policy_paths()]
    if not paths:
        err_console.print("[red]No policy files given and none configured.[/red]")
        sys.exit(ExitCode.ERROR)

    registry = PolicyRegistry()
    try:
        load_into(registry, paths)
    except PolicyParseError as exc:
        click.echo(str(exc), err=True)
        sys.exit(ExitCode.ERROR)

    node = MemoryNode(node_id, node_name, dict(parse_param(p) for p in params))

    if explain and not as_json:
        click.echo(explain_evaluation(registry, node))
        click.echo("")

    decisions = evaluate(registry, node)

    executor: MemoryExecutor | None = None
    if apply_:
        executor = MemoryExecutor(node)
        enforce(executor, decisions)

    if as_json:
        out: dict[str, Any] = {
            "node": {"id": node.id(), "name": node.name()},
            "decisions": [d.to_dict() for d in decisions],
        }
        if executor is not None:
            out["applied"] = {
                "params": node.params(),
                "warnings": [list(w) for w in executor.warnings],
                "cancelled": executor.cancelled,
            }
        click.echo(json.dumps(out, indent=2, default=str))
        return

    click.echo(f"Decisions: {len(decisions)}")
    for decision in decisions:
        click.echo(f"  {format_decision(decision)}")

    if executor is not None:
        click.echo("")
        click.echo(f"Params after apply: {json.dumps(node.params(), default=str)}")
        for policy_id, message in executor.warnings:
            click.echo(f"Warning [{policy_id}]: {message}")
        if executor.cancelled:
            click.echo(f"Cancelled: {', '.join(executor.cancelled)}")
