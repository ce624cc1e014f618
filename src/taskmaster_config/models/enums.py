"""Enum types for taskmaster-config.

This module provides type-safe enumerations for schema value types,
configuration sources and the configuration lifecycle. Using enums instead
of string constants provides:
- IDE autocomplete and type checking
- Iteration over valid values
- Clear documentation of allowed values
"""

from enum import Enum


class ValueType(str, Enum):
    """Declared type of a schema key."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    STRING_LIST = "string_list"

    @classmethod
    def values(cls) -> list[str]:
        """Return list of all type tags."""
        return [t.value for t in cls]


class ConfigSource(str, Enum):
    """Configuration sources, declared from lowest to highest precedence."""

    DEFAULTS = "defaults"
    PERSISTED = "persisted"
    ENVIRONMENT = "environment"
    RUNTIME = "runtime"

    @classmethod
    def values(cls) -> list[str]:
        """Return list of all source names."""
        return [s.value for s in cls]

    @property
    def precedence(self) -> int:
        """Precedence level (higher number wins)."""
        return list(ConfigSource).index(self)


class ConfigState(str, Enum):
    """Lifecycle of the effective configuration held by a ConfigManager."""

    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    VALIDATED = "validated"


class IssueSeverity(str, Enum):
    """Severity of a validation issue."""

    ERROR = "error"
    WARNING = "warning"
