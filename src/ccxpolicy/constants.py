"""ccxpolicy constants: filesystem layout and environment variables."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

CCXPOLICY_DIR_NAME = ".ccxpolicy"
CONFIG_FILENAME = "config.toml"

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

ENV_CONFIG = "CCXPOLICY_CONFIG"
ENV_LOG_LEVEL = "CCXPOLICY_LOG_LEVEL"
ENV_LOG_FORMAT = "CCXPOLICY_LOG_FORMAT"
ENV_POLICY_PATHS = "CCXPOLICY_POLICY_PATHS"
