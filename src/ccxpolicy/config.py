"""ccxpolicy configuration: Pydantic model and TOML load."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ccxpolicy.constants import (
    CCXPOLICY_DIR_NAME,
    CONFIG_FILENAME,
    ENV_CONFIG,
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
    ENV_POLICY_PATHS,
)
from ccxpolicy.exceptions import ConfigError, ConfigNotFoundError


def ccxpolicy_dir() -> Path:
    """Return the ccxpolicy config directory (~/.ccxpolicy). Not created."""
    return Path.home() / CCXPOLICY_DIR_NAME


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {sorted(allowed)}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


class PoliciesConfig(BaseModel):
    paths: list[str] = Field(default_factory=list)

    @field_validator("paths", mode="before")
    @classmethod
    def parse_paths(cls, v: Any) -> Any:
        """Accept both a list and an os.pathsep-separated string."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(os.pathsep) if p.strip()]
        return v

    def resolved(self, base: Path | None = None) -> list[Path]:
        """Expand ``~`` and resolve relative paths against ``base``."""
        out: list[Path] = []
        for raw in self.paths:
            p = Path(raw).expanduser()
            if base is not None and not p.is_absolute():
                p = base / p
            out.append(p)
        return out


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class CcxPolicyConfig(BaseModel):
    """Root ccxpolicy configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    policies: PoliciesConfig = Field(default_factory=PoliciesConfig)

    _config_path: Path | None = None

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def policy_paths(self) -> list[Path]:
        base = self._config_path.parent if self._config_path is not None else None
        return self.policies.resolved(base)


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get(ENV_CONFIG):
        return Path(env_path)
    return ccxpolicy_dir() / CONFIG_FILENAME


def default_config() -> CcxPolicyConfig:
    """Config used when no file exists; environment overrides still apply."""
    data: dict[str, Any] = {}
    _apply_env_overrides(data)
    try:
        return CcxPolicyConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid configuration from environment: {exc}") from exc


def load_config(path: Path | None = None) -> CcxPolicyConfig:
    """
    Load CcxPolicyConfig from a TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (CCXPOLICY_*)
      2. Config file ($CCXPOLICY_CONFIG or ~/.ccxpolicy/config.toml)
    """
    import tomllib

    cfg_path = path or _config_file_path()

    if not cfg_path.exists():
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    try:
        with open(cfg_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    _apply_env_overrides(data)

    try:
        config = CcxPolicyConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def load_config_or_default(path: Path | None = None) -> CcxPolicyConfig:
    """Like :func:`load_config`, but fall back to defaults when no file exists."""
    try:
        return load_config(path)
    except ConfigNotFoundError:
        if path is not None:
            raise
        return default_config()


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay CCXPOLICY_* environment variables onto the parsed TOML data."""
    if level := os.environ.get(ENV_LOG_LEVEL):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get(ENV_LOG_FORMAT):
        data.setdefault("logging", {})["format"] = fmt
    if paths := os.environ.get(ENV_POLICY_PATHS):
        data.setdefault("policies", {})["paths"] = paths
