"""Configuration persistence.

Writes explicit configuration changes back to the project file. Writes are
field-level read-modify-write: the current document is read, only the
changed keys are replaced, and everything else on disk (including keys the
current schema does not know about) is preserved verbatim. The result is
written atomically so that a crash or a concurrent reader never sees a
truncated file.

Key Classes:
    ConfigPersistence: save/remove/delete plus optional backups

Typical Usage:
    >>> persistence = ConfigPersistence()
    >>> persistence.save(path, {"models.main": "gpt-4o"})
    >>> persistence.remove(path, ["models.main"])
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from taskmaster_config.config.paths import BACKUP_PREFIX, BACKUPS_DIRNAME
from taskmaster_config.config.settings import EngineSettings, engine_settings
from taskmaster_config.exceptions import ConfigError, PersistenceError
from taskmaster_config.services.config_loader import ConfigLoader
from taskmaster_config.utils.dict_utils import delete_nested, set_nested
from taskmaster_config.utils.file_utils import (
    atomic_write_text,
    copy_file,
    delete_file,
    dump_document,
)

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """Convert tuples to lists so the document serializes cleanly."""
    if isinstance(value, tuple | list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


class ConfigPersistence:
    """Field-level, atomic writes to the project config file."""

    def __init__(self, settings: EngineSettings | None = None):
        """Initialize persistence.

        Args:
            settings: Engine settings (backups); defaults to the process-wide
                ``engine_settings``.
        """
        self.settings = settings or engine_settings
        self._reader = ConfigLoader()

    def save(
        self,
        path: Path,
        changes: Mapping[str, Any],
        *,
        backup: bool | None = None,
    ) -> None:
        """Merge changes into the on-disk document and write it atomically.

        The file (and its directory) is created if absent.

        Args:
            path: Project config file.
            changes: Fragment of dotted keys to write.
            backup: Back up the current file first (defaults to the
                ``backup_on_save`` setting).

        Raises:
            PersistenceError: If the current file cannot be read or parsed,
                or the new content cannot be written.
        """
        if not changes:
            return

        document = self._read_existing(path)
        for key, value in changes.items():
            set_nested(document, key, _plain(value))

        self._write(path, document, backup=backup)
        logger.info(f"Saved {', '.join(changes)} to {path}")

    def remove(
        self,
        path: Path,
        keys: Iterable[str],
        *,
        backup: bool | None = None,
    ) -> list[str]:
        """Remove keys from the on-disk document.

        Parents left empty are pruned. The file is only rewritten when at
        least one key was present.

        Returns:
            Keys that were actually removed.

        Raises:
            PersistenceError: If the file cannot be read, parsed or written.
        """
        if not path.exists():
            return []

        document = self._read_existing(path)
        removed = [key for key in keys if delete_nested(document, key)]
        if removed:
            self._write(path, document, backup=backup)
            logger.info(f"Removed {', '.join(removed)} from {path}")
        return removed

    def delete(self, path: Path) -> bool:
        """Delete the project config file.

        Returns:
            True if the file existed.

        Raises:
            PersistenceError: If the file exists but cannot be deleted.
        """
        try:
            deleted = delete_file(path)
        except OSError as e:
            raise PersistenceError(f"Failed to delete configuration: {e}", path) from e
        if deleted:
            logger.info(f"Deleted {path}")
        return deleted

    # =========================================================================
    # Backups
    # =========================================================================

    def backup_dir(self, path: Path) -> Path:
        """Directory holding backups of a config file."""
        return path.parent / BACKUPS_DIRNAME

    def create_backup(self, path: Path) -> Path | None:
        """Copy the current config file into the backups directory.

        Returns:
            Path of the backup, or None if there was no file to back up.

        Raises:
            PersistenceError: If the copy fails.
        """
        if not path.exists():
            return None

        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
        backup_path = self.backup_dir(path) / f"{BACKUP_PREFIX}{timestamp}{path.suffix}"
        try:
            copy_file(path, backup_path)
        except OSError as e:
            raise PersistenceError(f"Failed to create backup: {e}", backup_path) from e

        logger.debug(f"Backed up {path} to {backup_path}")
        self._prune_backups(path)
        return backup_path

    def list_backups(self, path: Path) -> list[str]:
        """Return backup file names for a config file, newest first."""
        directory = self.backup_dir(path)
        if not directory.is_dir():
            return []
        names = [
            p.name
            for p in directory.iterdir()
            if p.is_file() and p.name.startswith(BACKUP_PREFIX) and p.suffix == path.suffix
        ]
        return sorted(names, reverse=True)

    def restore_backup(self, path: Path, name: str) -> None:
        """Atomically replace the config file with a backup.

        Raises:
            PersistenceError: If the backup does not exist or cannot be restored.
        """
        if name not in self.list_backups(path):
            raise PersistenceError(f"Backup not found: {name}", self.backup_dir(path) / name)

        backup_path = self.backup_dir(path) / name
        try:
            content = backup_path.read_text(encoding="utf-8")
            atomic_write_text(path, content)
        except OSError as e:
            raise PersistenceError(f"Failed to restore backup: {e}", path) from e
        logger.info(f"Restored {path} from {name}")

    def _prune_backups(self, path: Path) -> None:
        for name in self.list_backups(path)[self.settings.max_backups :]:
            try:
                (self.backup_dir(path) / name).unlink()
            except OSError as e:
                logger.warning(f"Failed to remove old backup {name}: {e}")

    # =========================================================================
    # Internals
    # =========================================================================

    def _read_existing(self, path: Path) -> dict[str, Any]:
        """Read the current document for a read-modify-write cycle.

        Unlike loading, a file that cannot be parsed is an error here; it is
        never replaced.
        """
        if not path.exists():
            return {}
        try:
            return self._reader.read_raw(path)
        except ConfigError as e:
            raise PersistenceError(
                f"Refusing to overwrite unreadable configuration: {e.message}", path
            ) from e

    def _write(self, path: Path, document: dict[str, Any], *, backup: bool | None) -> None:
        if backup is None:
            backup = self.settings.backup_on_save
        if backup:
            self.create_backup(path)

        try:
            atomic_write_text(path, dump_document(document, path))
        except OSError as e:
            raise PersistenceError(f"Failed to save configuration: {e}", path) from e
