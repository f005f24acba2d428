"""
ccxpolicy CLI entry point.

Commands:
  ccxpolicy version                 — show version
  ccxpolicy validate <file>...      — validate declarative policy files
  ccxpolicy test [<file>...] --name — evaluate policies against a synthetic node
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from ccxpolicy import __version__

err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="ccxpolicy %(version)s")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $CCXPOLICY_CONFIG or ~/.ccxpolicy/config.toml)",
)
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str | None) -> None:
    """ccxpolicy — prioritized policy evaluation for host runtimes."""
    from ccxpolicy.cli._common import setup_context

    setup_context(ctx, config_path=config_path, log_level=log_level, console=err_console)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
def version() -> None:
    """Show the ccxpolicy version."""
    click.echo(f"ccxpolicy {__version__}")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("policy_files", nargs=-1, required=True, type=click.Path(dir_okay=False))
def validate(policy_files: tuple[str, ...]) -> None:
    """
    Validate declarative policy files.

    Exits 0 if every file is valid, 1 otherwise.
    """
    from ccxpolicy.cli._policy import cmd_validate

    cmd_validate(policy_files=policy_files)


# ---------------------------------------------------------------------------
# test
# ---------------------------------------------------------------------------


@cli.command("test")
@click.argument("policy_files", nargs=-1, type=click.Path(dir_okay=False))
@click.option("--name", "node_name", required=True, help="Node name policies match on.")
@click.option("--id", "node_id", default="node", show_default=True, help="Node id.")
@click.option(
    "--param",
    "params",
    multiple=True,
    metavar="KEY=VALUE",
    help="Node parameter; VALUE is read as YAML (1080 → int, true → bool).",
)
@click.option("--explain", is_flag=True, default=False, help="Show per-policy match details.")
@click.option(
    "--apply",
    "apply_",
    is_flag=True,
    default=False,
    help="Enforce the decisions on the synthetic node and show the result.",
)
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_context
def test_cmd(
    ctx: click.Context,
    policy_files: tuple[str, ...],
    node_name: str,
    node_id: str,
    params: tuple[str, ...],
    explain: bool,
    apply_: bool,
    as_json: bool,
) -> None:
    """
    Evaluate policies against a synthetic node and show the decisions.

    Without POLICY_FILES the paths from the config file are used.

    Example::

        ccxpolicy test policies.yaml --name transcode \\
            --param quality=1440 --explain --apply
    """
    from ccxpolicy.cli._policy import cmd_test

    cmd_test(
        config=ctx.obj["config"],
        policy_files=policy_files,
        node_name=node_name,
        node_id=node_id,
        params=params,
        explain=explain,
        apply_=apply_,
        as_json=as_json,
        err_console=err_console,
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
