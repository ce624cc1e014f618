"""Validation data models."""

from dataclasses import dataclass, field
from typing import Any

from taskmaster_config.models.enums import IssueSeverity


@dataclass
class ValidationIssue:
    """Single validation issue attached to a configuration key."""

    key: str
    reason: str
    severity: IssueSeverity = IssueSeverity.ERROR

    def __str__(self) -> str:
        """String representation of issue."""
        icon = "❌" if self.severity == IssueSeverity.ERROR else "⚠️"
        return f"{icon} {self.key}: {self.reason}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "reason": self.reason,
            "severity": self.severity.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationIssue":
        """Create from dictionary."""
        return cls(
            key=data["key"],
            reason=data["reason"],
            severity=IssueSeverity(data.get("severity", IssueSeverity.ERROR.value)),
        )


@dataclass
class ValidationResult:
    """Result of validating an effective configuration.

    Errors make the result invalid; warnings never do.
    """

    valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def add_error(self, key: str, reason: str) -> None:
        """Add an error and mark the result invalid."""
        self.errors.append(ValidationIssue(key, reason, IssueSeverity.ERROR))
        self.valid = False

    def add_warning(self, key: str, reason: str) -> None:
        """Add a warning."""
        self.warnings.append(ValidationIssue(key, reason, IssueSeverity.WARNING))

    def issues_for(self, key: str) -> list[ValidationIssue]:
        """Get all issues (errors first) reported against a key."""
        return [issue for issue in self.errors + self.warnings if issue.key == key]

    @property
    def error_keys(self) -> set[str]:
        """Keys with at least one error."""
        return {issue.key for issue in self.errors}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationResult":
        """Create from dictionary."""
        return cls(
            valid=data.get("valid", True),
            errors=[ValidationIssue.from_dict(i) for i in data.get("errors", [])],
            warnings=[ValidationIssue.from_dict(i) for i in data.get("warnings", [])],
        )
