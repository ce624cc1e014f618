"""Runtime state models.

Runtime state is what the CLI remembers between runs that is not
configuration: currently the active tag. It is stored in
``.taskmaster/state.json`` and never merged into the effective config.
"""

from dataclasses import dataclass, field
from typing import Any

# Field names in state.json; "activeTag" is the pre-currentTag spelling
CURRENT_TAG_FIELD = "currentTag"
LEGACY_TAG_FIELD = "activeTag"
LAST_UPDATED_FIELD = "lastUpdated"
METADATA_FIELD = "metadata"


@dataclass
class RuntimeState:
    """Contents of the runtime state file."""

    current_tag: str | None = None
    last_updated: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the state.json document."""
        data: dict[str, Any] = {}
        if self.current_tag:
            data[CURRENT_TAG_FIELD] = self.current_tag
        if self.last_updated:
            data[LAST_UPDATED_FIELD] = self.last_updated
        if self.metadata:
            data[METADATA_FIELD] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeState":
        """Build from a state.json document.

        Falls back to the legacy ``activeTag`` field. A missing or blank tag
        is left as None so the caller can apply its default.
        """
        tag = data.get(CURRENT_TAG_FIELD) or data.get(LEGACY_TAG_FIELD)
        if not isinstance(tag, str) or not tag.strip():
            tag = None
        last_updated = data.get(LAST_UPDATED_FIELD)
        metadata = data.get(METADATA_FIELD)
        return cls(
            current_tag=tag,
            last_updated=last_updated if isinstance(last_updated, str) else None,
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
        )
