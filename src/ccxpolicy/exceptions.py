"""ccxpolicy exception hierarchy."""

from __future__ import annotations


class CcxPolicyError(Exception):
    """Base exception for errors raised by ccxpolicy tooling.

    The core engine (registry, evaluate, enforce) never raises these;
    they come from configuration and declarative policy loading.
    """


class ConfigError(CcxPolicyError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class PolicyParseError(CcxPolicyError, ValueError):
    """Raised when a policy file cannot be parsed or fails validation."""


class Reason(Exception):
    """Operator-facing explanation attached to warn and cancel decisions.

    A Reason is carried as a value on a Decision and handed to the
    executor. The engine never raises it.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"Reason({self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reason):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash(("Reason", self.message))
