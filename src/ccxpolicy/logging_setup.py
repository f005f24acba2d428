"""Root logger wiring for the CLI and for hosts that want the defaults."""

from __future__ import annotations

import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from ccxpolicy.config import LoggingConfig


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """
    Install a single handler on the root logger.

    ``text`` logs through Rich to stderr; ``json`` writes JSON lines to
    stderr. Calling again replaces the previously installed handler.
    """
    handler: logging.Handler
    if config.format == "json":
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_ccxpolicy", False):
            root.removeHandler(existing)
    handler._ccxpolicy = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(config.level)
    return handler
