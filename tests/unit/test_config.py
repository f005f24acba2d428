"""Unit tests for configuration loading and logging setup."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import pytest
from rich.logging import RichHandler

from ccxpolicy.config import (
    CcxPolicyConfig,
    LoggingConfig,
    default_config,
    load_config,
    load_config_or_default,
)
from ccxpolicy.exceptions import ConfigError, ConfigNotFoundError
from ccxpolicy.logging_setup import JsonFormatter, configure_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CCXPOLICY_CONFIG",
        "CCXPOLICY_LOG_LEVEL",
        "CCXPOLICY_LOG_FORMAT",
        "CCXPOLICY_POLICY_PATHS",
    ):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoggingConfig:
    def test_defaults(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "text"

    def test_level_normalised(self) -> None:
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="Log level"):
            LoggingConfig(level="LOUD")

    def test_invalid_format(self) -> None:
        with pytest.raises(ValueError, match="Log format"):
            LoggingConfig(format="xml")


class TestLoadConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_load_file(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            '[logging]\nlevel = "warning"\nformat = "json"\n\n'
            '[policies]\npaths = ["rules.yaml", "/abs/other.yaml"]\n',
        )
        cfg = load_config(path)
        assert cfg.logging.level == "WARNING"
        assert cfg.logging.format == "json"
        assert cfg.config_path == path
        assert cfg.policy_paths() == [tmp_path / "rules.yaml", Path("/abs/other.yaml")]

    def test_invalid_toml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(_write(tmp_path, "[logging\n"))

    def test_invalid_values(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(_write(tmp_path, '[logging]\nlevel = "LOUD"\n'))

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, '[logging]\nlevel = "INFO"\n')
        monkeypatch.setenv("CCXPOLICY_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CCXPOLICY_POLICY_PATHS", os.pathsep.join(["a.yaml", "b.yaml"]))
        cfg = load_config(path)
        assert cfg.logging.level == "DEBUG"
        assert cfg.policies.paths == ["a.yaml", "b.yaml"]

    def test_env_config_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, '[logging]\nformat = "json"\n')
        monkeypatch.setenv("CCXPOLICY_CONFIG", str(path))
        assert load_config().logging.format == "json"

    def test_default_when_absent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CCXPOLICY_CONFIG", str(tmp_path / "absent.toml"))
        monkeypatch.setenv("CCXPOLICY_LOG_FORMAT", "json")
        cfg = load_config_or_default()
        assert isinstance(cfg, CcxPolicyConfig)
        assert cfg.logging.format == "json"
        assert cfg.config_path is None

    def test_explicit_missing_path_still_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config_or_default(tmp_path / "absent.toml")

    def test_default_config_bad_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CCXPOLICY_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigError):
            default_config()


class TestConfigureLogging:
    def test_text_uses_rich(self) -> None:
        root = logging.getLogger()
        handler = configure_logging(LoggingConfig(level="DEBUG"))
        try:
            assert isinstance(handler, RichHandler)
            assert root.level == logging.DEBUG
        finally:
            root.removeHandler(handler)

    def test_reconfigure_replaces_handler(self) -> None:
        root = logging.getLogger()
        first = configure_logging(LoggingConfig())
        second = configure_logging(LoggingConfig(format="json"))
        try:
            assert first not in root.handlers
            assert second in root.handlers
            assert isinstance(second.formatter, JsonFormatter)
        finally:
            root.removeHandler(second)

    def test_json_formatter(self) -> None:
        record = logging.LogRecord("ccxpolicy.x", logging.INFO, __file__, 1, "hi %s", ("there",), None)
        entry = json.loads(JsonFormatter().format(record))
        assert entry["message"] == "hi there"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "ccxpolicy.x"
