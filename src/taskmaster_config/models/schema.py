"""Configuration schema models.

The schema is a closed, statically declared table of key descriptors.
It is the single source of truth for which keys exist, which values they
accept, what their defaults are, and which environment variable maps to
each of them.
"""

import copy
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from taskmaster_config.constants import (
    ENV_PATH_SEPARATOR,
    ENV_PREFIX,
    FALSE_STRINGS,
    LIST_SEPARATOR,
    NULL_STRINGS,
    TRUE_STRINGS,
)
from taskmaster_config.exceptions import InvalidOverrideError, UnknownKeyError
from taskmaster_config.models.enums import IssueSeverity, ValueType


class KeyDescriptor(BaseModel):
    """Declaration of a single recognized configuration key."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Dotted key path, e.g. 'models.main'")
    value_type: ValueType = Field(description="Declared value type")
    default: Any = Field(default=None, description="Default value")
    allowed: tuple[str, ...] | None = Field(
        default=None, description="Allowed values (required for enum keys)"
    )
    minimum: float | None = Field(default=None, description="Inclusive lower bound")
    maximum: float | None = Field(default=None, description="Inclusive upper bound")
    nullable: bool = Field(default=False, description="Whether None is a valid value")
    secret: bool = Field(default=False, description="Mask value in output")
    description: str = Field(default="", description="Human-readable description")
    env_var: str | None = Field(
        default=None,
        description="Environment variable name (derived from the schema prefix if unset)",
    )

    @model_validator(mode="after")
    def _check_declaration(self) -> "KeyDescriptor":
        if not self.path or self.path.startswith(".") or self.path.endswith("."):
            raise ValueError(f"Invalid key path: {self.path!r}")
        if self.value_type == ValueType.ENUM and not self.allowed:
            raise ValueError(f"Enum key {self.path} must declare allowed values")
        reason = self.check(self.default)
        if reason:
            raise ValueError(f"Default for {self.path} is invalid: {reason}")
        return self

    def check(self, value: Any) -> str | None:
        """Check a value against this descriptor.

        Returns:
            None if the value conforms, otherwise the reason it does not.
        """
        if value is None:
            return None if self.nullable else "value is required"

        vt = self.value_type
        if vt in (ValueType.STRING, ValueType.ENUM):
            if not isinstance(value, str):
                return f"expected a string, got {type(value).__name__}"
        elif vt == ValueType.INTEGER:
            # bool is a subclass of int
            if isinstance(value, bool) or not isinstance(value, int):
                return f"expected an integer, got {type(value).__name__}"
        elif vt == ValueType.NUMBER:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return f"expected a number, got {type(value).__name__}"
        elif vt == ValueType.BOOLEAN:
            if not isinstance(value, bool):
                return f"expected a boolean, got {type(value).__name__}"
        elif vt == ValueType.STRING_LIST:
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                return "expected a list of strings"

        if self.allowed is not None and vt != ValueType.STRING_LIST and value not in self.allowed:
            return f"must be one of {', '.join(self.allowed)}"

        if vt in (ValueType.INTEGER, ValueType.NUMBER):
            if self.minimum is not None and value < self.minimum:
                return f"must be >= {self.minimum:g}"
            if self.maximum is not None and value > self.maximum:
                return f"must be <= {self.maximum:g}"

        return None

    def coerce(self, raw: str) -> Any:
        """Convert a raw string (environment, CLI) to this key's type.

        Raises:
            ValueError: If the string cannot be converted or the converted
                value does not conform to the descriptor.
        """
        text = raw.strip()
        if self.nullable and text.lower() in NULL_STRINGS:
            return None

        vt = self.value_type
        value: Any
        if vt == ValueType.INTEGER:
            try:
                value = int(text)
            except ValueError:
                raise ValueError(f"expected an integer, got {raw!r}") from None
        elif vt == ValueType.NUMBER:
            try:
                value = int(text)
            except ValueError:
                try:
                    value = float(text)
                except ValueError:
                    raise ValueError(f"expected a number, got {raw!r}") from None
        elif vt == ValueType.BOOLEAN:
            lowered = text.lower()
            if lowered in TRUE_STRINGS:
                value = True
            elif lowered in FALSE_STRINGS:
                value = False
            else:
                raise ValueError(f"expected a boolean, got {raw!r}")
        elif vt == ValueType.ENUM:
            matches = [a for a in self.allowed or () if a.lower() == text.lower()]
            value = matches[0] if matches else text
        elif vt == ValueType.STRING_LIST:
            value = [part.strip() for part in text.split(LIST_SEPARATOR) if part.strip()]
        else:
            value = raw

        reason = self.check(value)
        if reason:
            raise ValueError(reason)
        return value

    def default_value(self) -> Any:
        """Return a copy of the default safe to hand out."""
        if isinstance(self.default, tuple):
            return list(self.default)
        return copy.deepcopy(self.default)


@dataclass(frozen=True)
class CrossFieldRule:
    """Constraint spanning several keys.

    Attributes:
        key: Key the issue is reported against.
        message: Reason shown when the rule is violated.
        check: Returns True when the configuration satisfies the rule.
        severity: Whether a violation is an error or only a warning.
    """

    key: str
    message: str
    check: Callable[[Mapping[str, Any]], bool]
    severity: IssueSeverity = IssueSeverity.ERROR


class ConfigSchema:
    """Versioned, closed table of key descriptors."""

    def __init__(
        self,
        keys: Iterable[KeyDescriptor],
        *,
        version: int = 1,
        env_prefix: str = ENV_PREFIX,
        rules: Iterable[CrossFieldRule] = (),
    ):
        """Initialize schema.

        Args:
            keys: Key descriptors, in display order.
            version: Schema version.
            env_prefix: Prefix used to derive environment variable names.
            rules: Cross-field rules checked during validation.

        Raises:
            ValueError: If a key is declared twice, a key is nested under
                another key, or a rule names an unknown key.
        """
        self.version = version
        self.env_prefix = env_prefix
        self._keys: dict[str, KeyDescriptor] = {}
        for descriptor in keys:
            if descriptor.path in self._keys:
                raise ValueError(f"Duplicate schema key: {descriptor.path}")
            self._keys[descriptor.path] = descriptor

        for path in self._keys:
            parts = path.split(".")
            for i in range(1, len(parts)):
                parent = ".".join(parts[:i])
                if parent in self._keys:
                    raise ValueError(f"Schema key {path} is nested under key {parent}")

        self.rules: tuple[CrossFieldRule, ...] = tuple(rules)
        for rule in self.rules:
            if rule.key not in self._keys:
                raise ValueError(f"Rule references unknown key: {rule.key}")

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[KeyDescriptor]:
        return iter(self._keys.values())

    def __len__(self) -> int:
        return len(self._keys)

    def keys(self) -> list[str]:
        """Return all key paths in declaration order."""
        return list(self._keys)

    def descriptor(self, key: str) -> KeyDescriptor:
        """Return the descriptor for a key.

        Raises:
            UnknownKeyError: If the key is not in the schema.
        """
        try:
            return self._keys[key]
        except KeyError:
            raise UnknownKeyError(key) from None

    def defaults(self) -> dict[str, Any]:
        """Return a fresh fragment holding every key's default."""
        return {path: d.default_value() for path, d in self._keys.items()}

    def env_var_for(self, key: str) -> str:
        """Return the environment variable name mapped to a key."""
        descriptor = self.descriptor(key)
        if descriptor.env_var:
            return descriptor.env_var
        return self.env_prefix + key.replace(".", ENV_PATH_SEPARATOR).upper()

    def check_value(self, key: str, value: Any) -> str | None:
        """Return the reason a value is invalid for a key, or None."""
        return self.descriptor(key).check(value)

    def ensure_valid(self, key: str, value: Any) -> None:
        """Raise if a value is invalid for a key.

        Raises:
            UnknownKeyError: If the key is not in the schema.
            InvalidOverrideError: If the value does not conform.
        """
        reason = self.check_value(key, value)
        if reason:
            raise InvalidOverrideError(key, value, reason)

    def is_secret(self, key: str) -> bool:
        """Check whether a key holds a secret."""
        return key in self._keys and self._keys[key].secret
