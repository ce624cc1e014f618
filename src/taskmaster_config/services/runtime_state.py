"""Runtime override state.

Holds configuration overrides that live for the current process only
(feature flags toggled for one run, values injected by a caller). They
sit above every other source, are never written to disk and are not
visible to other processes.
"""

import copy
import logging
from collections.abc import Iterator
from typing import Any

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.models.schema import ConfigSchema

logger = logging.getLogger(__name__)


class RuntimeStateManager:
    """In-memory store of process-lifetime overrides."""

    def __init__(self, schema: ConfigSchema = DEFAULT_SCHEMA):
        self.schema = schema
        self._overrides: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Set an override.

        Raises:
            UnknownKeyError: If the key is not in the schema.
            InvalidOverrideError: If the value does not conform to the schema.
        """
        self.schema.ensure_valid(key, value)
        self._overrides[key] = copy.deepcopy(value)
        logger.debug(f"Runtime override set: {key}")

    def get(self, key: str) -> Any:
        """Return the override for a key, or None if there is none."""
        return copy.deepcopy(self._overrides.get(key))

    def clear(self, key: str) -> None:
        """Remove the override for a key (no-op if absent)."""
        if key in self._overrides:
            del self._overrides[key]
            logger.debug(f"Runtime override cleared: {key}")

    def clear_all(self) -> None:
        """Remove every override."""
        self._overrides.clear()

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of the current overrides for merging."""
        return copy.deepcopy(self._overrides)

    def __contains__(self, key: object) -> bool:
        return key in self._overrides

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._overrides))

    def __len__(self) -> int:
        return len(self._overrides)
