"""Exception types raised by ReverseKit."""

from __future__ import annotations


class ReverseKitError(Exception):
    """Base class for every error ReverseKit raises on purpose."""


class ConfigError(ReverseKitError):
    """Raised when a configuration file or environment is invalid."""


class ParserError(ReverseKitError):
    """Raised when an input source cannot be turned into entities."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")
