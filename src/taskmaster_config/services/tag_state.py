"""Active tag state.

Task Master works on one tag (task list) at a time. The active tag is
runtime state, not configuration: it lives in ``.taskmaster/state.json``
next to the project config, survives between runs, and is never merged
into the effective configuration.

Resolution (lowest to highest):
    1. ``tags.defaultTag`` from the effective configuration
    2. ``currentTag`` in state.json (legacy ``activeTag`` also read)
    3. ``TASKMASTER_TAG`` environment variable

A missing state file means the default tag. A state file that cannot be
read or parsed is logged and ignored; it is replaced on the next write.

Typical Usage:
    >>> store = TagStateStore(project_root / STATE_FILE)
    >>> store.load(default_tag="master")
    >>> store.set_current_tag("feature-x")
    >>> store.current_tag
    'feature-x'
"""

import copy
import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from taskmaster_config.config.messages import ERROR_MESSAGES, WARNING_MESSAGES
from taskmaster_config.constants import DEFAULT_TAG, JSON_INDENT
from taskmaster_config.exceptions import PersistenceError
from taskmaster_config.models.state import RuntimeState
from taskmaster_config.utils.file_utils import atomic_write_text, delete_file, read_document

logger = logging.getLogger(__name__)


class TagStateStore:
    """Reads and writes the active tag state file."""

    def __init__(self, path: Path, default_tag: str = DEFAULT_TAG):
        self.path = path
        self.default_tag = default_tag
        self._state = RuntimeState()
        self._env_tag: str | None = None

    @property
    def current_tag(self) -> str:
        """Active tag, with the environment override applied."""
        return self._env_tag or self._state.current_tag or self.default_tag

    @property
    def stored_tag(self) -> str | None:
        """Active tag as recorded in the state file, if any."""
        return self._state.current_tag

    @property
    def forced_by_env(self) -> bool:
        return self._env_tag is not None

    @property
    def state(self) -> RuntimeState:
        return copy.deepcopy(self._state)

    def load(self, *, default_tag: str | None = None, env_tag: str | None = None) -> RuntimeState:
        """Read the state file.

        Args:
            default_tag: Tag used when the file names none (usually
                ``tags.defaultTag``). Keeps the current default if omitted.
            env_tag: Tag forced by the environment, if any.

        Returns:
            The state as stored on disk (without the environment override).
        """
        if default_tag:
            self.default_tag = default_tag
        self._env_tag = env_tag or None
        self._state = self._read()
        if self._env_tag:
            logger.debug(f"Active tag forced by environment: {self._env_tag}")
        return self.state

    def set_current_tag(self, tag: str) -> RuntimeState:
        """Record a new active tag, keeping existing metadata.

        Raises:
            PersistenceError: If the state file cannot be written.
        """
        state = RuntimeState(current_tag=tag, metadata=dict(self._state.metadata))
        self._write(state)
        logger.info(f"Active tag set to {tag}")
        return self.state

    def update_metadata(self, metadata: Mapping[str, Any]) -> RuntimeState:
        """Merge entries into the state metadata and write the file.

        Raises:
            PersistenceError: If the state file cannot be written.
        """
        merged = {**self._state.metadata, **copy.deepcopy(dict(metadata))}
        self._write(RuntimeState(current_tag=self._state.current_tag, metadata=merged))
        return self.state

    def clear(self) -> bool:
        """Delete the state file and fall back to the default tag.

        Returns:
            True if a state file was deleted.

        Raises:
            PersistenceError: If the state file cannot be deleted.
        """
        try:
            deleted = delete_file(self.path)
        except OSError as e:
            raise PersistenceError(f"Failed to delete runtime state: {e}", self.path) from e
        self._state = RuntimeState()
        if deleted:
            logger.info(f"Cleared runtime state {self.path}")
        return deleted

    # =========================================================================
    # Internals
    # =========================================================================

    def _read(self) -> RuntimeState:
        if not self.path.exists():
            return RuntimeState()

        try:
            data = read_document(self.path)
        except (OSError, ValueError) as e:
            logger.warning(WARNING_MESSAGES["state_read_failed"].format(path=self.path, error=e))
            return RuntimeState()

        if not isinstance(data, dict):
            logger.warning(WARNING_MESSAGES["state_not_mapping"].format(path=self.path))
            return RuntimeState()

        return RuntimeState.from_dict(data)

    def _write(self, state: RuntimeState) -> None:
        state.last_updated = datetime.now(UTC).isoformat()
        content = json.dumps(state.to_dict(), indent=JSON_INDENT, ensure_ascii=False) + "\n"
        try:
            atomic_write_text(self.path, content)
        except OSError as e:
            raise PersistenceError(
                ERROR_MESSAGES["state_write_failed"].format(path=self.path, error=e), self.path
            ) from e
        self._state = state
