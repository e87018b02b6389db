"""Exception hierarchy for opsboard."""

from __future__ import annotations


class OpsBoardError(Exception):
    """Base exception for all opsboard errors."""


class ConfigError(OpsBoardError):
    """Configuration loading or validation failure."""


class ParseError(OpsBoardError):
    """Assisted text parsing failure."""


class ProviderError(OpsBoardError):
    """Remote list store operation failure."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Missing or rejected credentials."""


class AccessDeniedError(ProviderError):
    """The account is authenticated but lacks permission on the list."""


class NotFoundError(ProviderError):
    """A list, column or item does not exist on the remote store."""


class InvalidRecordError(OpsBoardError):
    """A record fails a business rule and must not be persisted."""
