"""Configuration file loader.

Produces raw configuration fragments from the built-in defaults and from
the persisted project file. The loader parses syntax and flattens the
document into dotted keys; it does not validate, and unknown keys pass
through so that the merger and validator can decide what to do with them.

A missing file yields an empty fragment. An unreadable or malformed file
yields an empty fragment plus a warning: nothing raised while reading the
project file escapes this module.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.config.messages import WARNING_MESSAGES
from taskmaster_config.config.paths import CONFIG_FILE, LEGACY_CONFIG_FILE
from taskmaster_config.exceptions import ParseError, SourceReadError
from taskmaster_config.models.enums import ConfigSource
from taskmaster_config.models.results import SourceWarning
from taskmaster_config.models.schema import ConfigSchema
from taskmaster_config.utils.dict_utils import flatten
from taskmaster_config.utils.file_utils import file_exists, read_document

logger = logging.getLogger(__name__)


def resolve_config_path(project_root: Path) -> Path:
    """Return the project config file path.

    Prefers ``.taskmaster/config.yaml``. The legacy ``.taskmaster/config.json``
    is used when it is the only one present, so existing projects keep
    reading and writing the file they already have.
    """
    primary = project_root / CONFIG_FILE
    legacy = project_root / LEGACY_CONFIG_FILE
    if not file_exists(primary) and file_exists(legacy):
        return legacy
    return primary


class ConfigLoader:
    """Loads configuration fragments from defaults and the project file."""

    def __init__(self, schema: ConfigSchema = DEFAULT_SCHEMA):
        self.schema = schema
        self.warnings: list[SourceWarning] = []

    def load_defaults(self) -> dict[str, Any]:
        """Return the schema's default values as a fragment. Always succeeds."""
        return self.schema.defaults()

    def load_persisted(self, path: Path) -> dict[str, Any]:
        """Load the project file as a flat fragment.

        Args:
            path: Path to the project config file.

        Returns:
            Fragment of dotted keys (empty if the file is absent, unreadable
            or malformed). Warnings are available on ``self.warnings``.
        """
        self.warnings = []

        if not path.exists():
            logger.debug(f"No config file at {path}, using defaults")
            return {}

        try:
            return flatten(self.read_raw(path))
        except SourceReadError as e:
            self._warn(WARNING_MESSAGES["config_read_failed"].format(path=path, error=e.message))
        except ParseError as e:
            self._warn(e.message)
        return {}

    def read_raw(self, path: Path) -> dict[str, Any]:
        """Read the project file as a nested document.

        Raises:
            SourceReadError: If the file exists but cannot be read.
            ParseError: If the file is malformed or its root is not a mapping.
        """
        try:
            data = read_document(path)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ParseError(
                WARNING_MESSAGES["config_parse_failed"].format(path=path, error=e), path
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(str(e), path) from e

        if not isinstance(data, dict):
            raise ParseError(WARNING_MESSAGES["config_not_mapping"].format(path=path), path)
        return data

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(SourceWarning(ConfigSource.PERSISTED, message))
