"""Shared CLI setup: config load and logging."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from ccxpolicy.config import LoggingConfig, load_config_or_default
from ccxpolicy.constants import ExitCode
from ccxpolicy.exceptions import ConfigError
from ccxpolicy.logging_setup import configure_logging


def setup_context(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    console: Console,
) -> None:
    try:
        config = load_config_or_default(config_path)
        if log_level:
            config.logging = LoggingConfig(level=log_level, format=config.logging.format)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
    except ValueError as exc:
        console.print(f"[red]Invalid --log-level:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)

    configure_logging(config.logging)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
