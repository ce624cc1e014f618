"""Data models for taskmaster-config"""

from .config import ModelConfig, StorageConfig
from .enums import ConfigSource, ConfigState, IssueSeverity, ValueType
from .results import LoadResult, MergeOutcome, SourceWarning
from .schema import ConfigSchema, CrossFieldRule, KeyDescriptor
from .state import RuntimeState
from .validation import ValidationIssue, ValidationResult

__all__ = [
    "ConfigSchema",
    "ConfigSource",
    "ConfigState",
    "CrossFieldRule",
    "IssueSeverity",
    "KeyDescriptor",
    "LoadResult",
    "MergeOutcome",
    "ModelConfig",
    "RuntimeState",
    "SourceWarning",
    "StorageConfig",
    "ValidationIssue",
    "ValidationResult",
    "ValueType",
]
