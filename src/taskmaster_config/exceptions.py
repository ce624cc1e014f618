"""Custom exceptions for taskmaster-config.

All exceptions inherit from ConfigError, allowing callers to catch every
engine error with a single except clause if desired.

Exception hierarchy:
    ConfigError (base)
    ├── SourceReadError       (recovered by the loader, reported as warning)
    ├── ParseError            (recovered by the loader, reported as warning)
    ├── UnknownKeyError
    ├── InvalidOverrideError
    ├── PersistenceError
    └── ConfigNotLoadedError

Validation problems are never raised; they are returned as data inside
a ValidationResult.
"""

from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Base exception for all configuration engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize configuration error.

        Args:
            message: Error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Source Errors (recovered locally)
# =============================================================================


class SourceReadError(ConfigError):
    """Raised when a configuration file exists but cannot be read.

    Examples:
        - Permission denied on .taskmaster/config.yaml
        - Path is a directory
    """

    def __init__(self, message: str, path: Path | None = None):
        details = {"path": str(path)} if path else {}
        super().__init__(message, details)
        self.path = path


class ParseError(ConfigError):
    """Raised when a configuration file cannot be parsed.

    Examples:
        - Invalid YAML/JSON syntax
        - Document root is not a mapping
    """

    def __init__(self, message: str, path: Path | None = None):
        details = {"path": str(path)} if path else {}
        super().__init__(message, details)
        self.path = path


# =============================================================================
# Caller-facing Errors
# =============================================================================


class UnknownKeyError(ConfigError, KeyError):
    """Raised when a caller names a key that is not in the schema."""

    def __init__(self, key: str):
        super().__init__(f"Unknown configuration key: {key}", {"key": key})
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return ConfigError.__str__(self)


class InvalidOverrideError(ConfigError, ValueError):
    """Raised when a value does not conform to its schema entry.

    Examples:
        - String given for an integer key
        - Value outside an enum's allowed set
        - Number outside the declared range
    """

    def __init__(self, key: str, value: Any, reason: str):
        """Initialize invalid override error.

        Args:
            key: The configuration key being set.
            value: The rejected value (truncated if long).
            reason: Why the value was rejected.
        """
        value_str = repr(value)
        if len(value_str) > 80:
            value_str = value_str[:77] + "..."
        super().__init__(
            f"Invalid value for {key}: {reason}",
            {"key": key, "value": value_str},
        )
        self.key = key
        self.value = value
        self.reason = reason


class PersistenceError(ConfigError):
    """Raised when configuration cannot be written to disk.

    Not retried automatically; the caller decides whether to retry.
    """

    def __init__(self, message: str, path: Path | None = None):
        details = {"path": str(path)} if path else {}
        super().__init__(message, details)
        self.path = path


class ConfigNotLoadedError(ConfigError):
    """Raised when configuration is read before load() has been called."""

    def __init__(self) -> None:
        super().__init__("Configuration has not been loaded; call load() first")
