"""Result types for the configuration services.

Plain dataclasses returned by the loader, merger and config manager.
"""

from dataclasses import dataclass, field
from typing import Any

from taskmaster_config.models.enums import ConfigSource


@dataclass(frozen=True)
class SourceWarning:
    """Non-fatal problem encountered while reading a configuration source."""

    source: ConfigSource
    reason: str
    key: str | None = None

    def __str__(self) -> str:
        where = f" ({self.key})" if self.key else ""
        return f"[{self.source.value}]{where} {self.reason}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"source": self.source.value, "key": self.key, "reason": self.reason}


@dataclass
class LoadResult:
    """Outcome of a load() or reload() call.

    Attributes:
        success: Always True unless the pipeline itself failed; source
            problems only add warnings.
        warnings: Source-level warnings (missing/malformed file, bad
            environment values, ignored unknown keys).
        sources: Sources that contributed a non-empty fragment, lowest
            precedence first.
    """

    success: bool = True
    warnings: list[SourceWarning] = field(default_factory=list)
    sources: list[ConfigSource] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "warnings": [w.to_dict() for w in self.warnings],
            "sources": [s.value for s in self.sources],
        }


@dataclass
class MergeOutcome:
    """Effective configuration plus the bookkeeping gathered while merging."""

    config: dict[str, Any]
    origins: dict[str, ConfigSource]
    unknown_keys: dict[str, ConfigSource] = field(default_factory=dict)
