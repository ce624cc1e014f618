"""Configuration manager for Task Master.

This module provides the facade that external collaborators (CLI commands,
task storage, the AI layer) use to read and change configuration.

Key Classes:
    ConfigManager: Owns the effective configuration for one process

Dependencies:
    - ConfigLoader, EnvironmentConfigProvider (source fragments)
    - ConfigMerger (precedence)
    - RuntimeStateManager (process-lifetime overrides)
    - ConfigPersistence (field-level atomic writes)
    - TagStateStore (active tag in .taskmaster/state.json)

Configuration Hierarchy (lowest to highest):
    1. Built-in defaults (config/defaults.py)
    2. Project config (.taskmaster/config.yaml)
    3. Environment variables (TASKMASTER_*)
    4. Runtime overrides (set(..., persist=False))

Lifecycle:
    UNINITIALIZED --load()--> LOADED --validate() ok--> VALIDATED
    Any change to a source (set, unset, reload, ...) goes back to LOADED.
    A failed validate() leaves the manager LOADED and still serving the
    current values.

Reload Policy:
    Runtime overrides survive reload(). They are dropped only by
    clear_override(), clear_overrides(), reset(), or when the same key is
    written to disk by set(..., persist=True) or save().

Active Tag:
    The active tag is runtime state kept in .taskmaster/state.json, not a
    configuration key. It defaults to tags.defaultTag and TASKMASTER_TAG
    forces it. reset() deletes the state file along with the config file.

Typical Usage:
    >>> manager = ConfigManager.create(Path.cwd())
    >>> manager.get("models.main")
    'claude-3-5-sonnet-20241022'
    >>> manager.set("workflow.enableAutopilot", True)              # this process only
    >>> manager.set("models.main", "gpt-4o", persist=True)         # written to disk
    >>> result = manager.validate()
    >>> result.valid
    True
"""

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from threading import RLock
from typing import Any

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.config.messages import ERROR_MESSAGES, WARNING_MESSAGES
from taskmaster_config.config.paths import STATE_FILENAME
from taskmaster_config.config.settings import EngineSettings
from taskmaster_config.constants import (
    DEFAULT_RESPONSE_LANGUAGE,
    DEFAULT_TAG,
    DEFAULT_TAG_KEY,
    RESPONSE_LANGUAGE_KEY,
    STORAGE_TYPE_API,
    VALID_STORAGE_TYPES,
)
from taskmaster_config.exceptions import ConfigNotLoadedError, InvalidOverrideError
from taskmaster_config.models.config import ModelConfig, StorageConfig
from taskmaster_config.models.enums import ConfigSource, ConfigState, IssueSeverity
from taskmaster_config.models.results import LoadResult, SourceWarning
from taskmaster_config.models.schema import ConfigSchema
from taskmaster_config.models.validation import ValidationResult
from taskmaster_config.services.config_loader import ConfigLoader, resolve_config_path
from taskmaster_config.services.config_merger import ConfigMerger
from taskmaster_config.services.config_persistence import ConfigPersistence
from taskmaster_config.services.environment_provider import EnvironmentConfigProvider
from taskmaster_config.services.runtime_state import RuntimeStateManager
from taskmaster_config.services.tag_state import TagStateStore
from taskmaster_config.utils.dict_utils import unflatten

logger = logging.getLogger(__name__)

# Storage types for which API settings are exposed
_API_STORAGE_TYPES = frozenset(VALID_STORAGE_TYPES) - {"file"}


class ConfigManager:
    """Service that resolves, validates and updates configuration."""

    def __init__(
        self,
        project_root: Path | None = None,
        *,
        schema: ConfigSchema = DEFAULT_SCHEMA,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
        settings: EngineSettings | None = None,
    ):
        """Initialize config manager.

        Nothing is read until load() is called (or use ``create``).

        Args:
            project_root: Project root directory (defaults to current directory)
            schema: Configuration schema
            config_path: Explicit config file (defaults to .taskmaster/config.yaml,
                or the legacy config.json when only that exists)
            environ: Environment mapping (defaults to os.environ)
            settings: Engine settings for persistence
        """
        self.project_root = project_root or Path.cwd()
        self.schema = schema
        self._config_path = config_path

        self.loader = ConfigLoader(schema)
        self.env_provider = EnvironmentConfigProvider(schema, environ)
        self.merger = ConfigMerger(schema)
        self.runtime = RuntimeStateManager(schema)
        self.persistence = ConfigPersistence(settings)
        self.tag_state = TagStateStore(self.config_path.parent / STATE_FILENAME)

        self._layers: list[tuple[ConfigSource, dict[str, Any]]] = []
        self._config: dict[str, Any] = {}
        self._origins: dict[str, ConfigSource] = {}
        self._unknown_keys: dict[str, ConfigSource] = {}
        self._state = ConfigState.UNINITIALIZED
        self._lock = RLock()

        self.last_load_result: LoadResult | None = None
        self.last_validation: ValidationResult | None = None

    @classmethod
    def create(cls, project_root: Path | None = None, **kwargs: Any) -> "ConfigManager":
        """Create a manager and load configuration from all sources."""
        manager = cls(project_root, **kwargs)
        manager.load()
        return manager

    # ==================== Lifecycle ====================

    @property
    def config_path(self) -> Path:
        """Project config file this manager reads and writes."""
        if self._config_path is not None:
            return self._config_path
        return resolve_config_path(self.project_root)

    @property
    def state(self) -> ConfigState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state != ConfigState.UNINITIALIZED

    def load(self) -> LoadResult:
        """Read every source and build the effective configuration.

        Safe to call repeatedly; with no source changes the resulting
        configuration is identical each time.

        Returns:
            LoadResult with source-level warnings.
        """
        path = self.config_path
        warnings: list[SourceWarning] = []

        defaults = self.loader.load_defaults()
        persisted = self.loader.load_persisted(path)
        warnings.extend(self.loader.warnings)
        environment = self.env_provider.read()
        warnings.extend(self.env_provider.warnings)

        self._layers = [
            (ConfigSource.DEFAULTS, defaults),
            (ConfigSource.PERSISTED, persisted),
            (ConfigSource.ENVIRONMENT, environment),
        ]
        self._rebuild()
        self.tag_state.load(env_tag=self.env_provider.read_active_tag())

        for key, source in self._unknown_keys.items():
            message = WARNING_MESSAGES["unknown_key_ignored"].format(key=key, path=path)
            logger.warning(message)
            warnings.append(SourceWarning(source, message, key=key))

        sources = [source for source, fragment in self._all_layers() if fragment]
        result = LoadResult(success=True, warnings=warnings, sources=sources)
        self.last_load_result = result
        logger.debug(f"Loaded configuration from {', '.join(s.value for s in sources)}")
        return result

    def reload(self) -> LoadResult:
        """Re-read every source, discarding the current effective configuration.

        Runtime overrides are kept and re-applied on top.
        """
        return self.load()

    def validate(self) -> ValidationResult:
        """Check the effective configuration against the schema.

        Never raises. A valid result moves the manager to VALIDATED; an
        invalid one leaves it LOADED, still serving the current values.
        """
        result = ValidationResult()
        if not self.is_loaded:
            result.add_error("*", ConfigNotLoadedError().message)
            self.last_validation = result
            return result

        for key, value in self._config.items():
            reason = self.schema.check_value(key, value)
            if reason:
                result.add_error(key, f"{reason} (from {self._origins[key].value})")

        for rule in self.schema.rules:
            try:
                satisfied = rule.check(self._config)
            except (TypeError, KeyError, ValueError):
                # Values of the wrong type are already reported above
                continue
            if satisfied:
                continue
            if rule.severity == IssueSeverity.ERROR:
                result.add_error(rule.key, rule.message)
            else:
                result.add_warning(rule.key, rule.message)

        for key in self._unknown_keys:
            result.add_warning(key, "unknown key ignored")

        for descriptor in self.schema:
            if (
                descriptor.secret
                and self._origins.get(descriptor.path) == ConfigSource.PERSISTED
                and self._config.get(descriptor.path)
            ):
                env_var = self.schema.env_var_for(descriptor.path)
                result.add_warning(
                    descriptor.path, WARNING_MESSAGES["secret_in_file"].format(env_var=env_var)
                )

        self._state = ConfigState.VALIDATED if result.valid else ConfigState.LOADED
        self.last_validation = result
        if not result.valid:
            logger.debug(f"Configuration invalid: {', '.join(sorted(result.error_keys))}")
        return result

    # ==================== Configuration Access ====================

    def get(self, key: str) -> Any:
        """Return the effective value of a key.

        Never reloads; reflects the last load/recompute.

        Raises:
            UnknownKeyError: If the key is not in the schema.
            ConfigNotLoadedError: If load() has not been called.
        """
        self.schema.descriptor(key)
        self._require_loaded()
        return copy.deepcopy(self._config[key])

    def origin(self, key: str) -> ConfigSource:
        """Return the source the effective value of a key comes from."""
        self.schema.descriptor(key)
        self._require_loaded()
        return self._origins[key]

    def as_dict(self, *, nested: bool = False) -> dict[str, Any]:
        """Return a copy of the effective configuration.

        Args:
            nested: Return nested sections ({"models": {"main": ...}})
                instead of dotted keys.
        """
        self._require_loaded()
        data = copy.deepcopy(self._config)
        return unflatten(data) if nested else data

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Return the keys under a dotted prefix as a nested dict.

        ``get_section("models")`` returns ``{"main": ..., "research": ...,
        "fallback": ...}``. An unknown prefix returns an empty dict.
        """
        self._require_loaded()
        start = f"{prefix}."
        section = {
            key[len(start) :]: copy.deepcopy(value)
            for key, value in self._config.items()
            if key.startswith(start)
        }
        return unflatten(section)

    @property
    def unknown_keys(self) -> list[str]:
        """Keys found in sources but not in the schema (ignored)."""
        return list(self._unknown_keys)

    def get_model_config(self) -> ModelConfig:
        """Get model configuration."""
        return ModelConfig(**self.get_section("models"))

    def get_storage_config(self) -> StorageConfig:
        """Get resolved storage configuration.

        API settings are only exposed for ``api`` and ``auto`` storage.
        """
        storage = self.get_section("storage")
        storage_type = storage.get("type") or "auto"
        common = {
            "type": storage_type,
            "base_path": self.project_root,
            "encoding": storage.get("encoding"),
            "atomic_operations": storage.get("atomicOperations"),
        }
        if storage_type in _API_STORAGE_TYPES:
            endpoint = storage.get("apiEndpoint")
            token = storage.get("apiAccessToken")
            return StorageConfig(
                **common,
                api_endpoint=endpoint,
                api_access_token=token,
                api_configured=bool(endpoint or token),
            )
        return StorageConfig(**common, api_configured=False)

    def get_response_language(self) -> str:
        """Get response language setting."""
        return self.get(RESPONSE_LANGUAGE_KEY) or DEFAULT_RESPONSE_LANGUAGE

    def is_api_explicitly_configured(self) -> bool:
        """Check whether storage is pinned to the API (not just ``auto``)."""
        return self.get_storage_config().type == STORAGE_TYPE_API

    # ==================== Active Tag ====================

    def get_active_tag(self) -> str:
        """Return the active tag.

        TASKMASTER_TAG wins over state.json, which wins over tags.defaultTag.
        """
        self._require_loaded()
        return self.tag_state.current_tag

    def set_active_tag(self, tag: str) -> None:
        """Switch the active tag and record it in state.json.

        Raises:
            InvalidOverrideError: If the tag is not a non-empty string.
            PersistenceError: If the state file cannot be written.
        """
        if not isinstance(tag, str) or not tag.strip():
            raise InvalidOverrideError("activeTag", tag, ERROR_MESSAGES["invalid_tag"])
        with self._lock:
            self.tag_state.set_current_tag(tag.strip())

    # ==================== Configuration Updates ====================

    def set(self, key: str, value: Any, *, persist: bool = False) -> None:
        """Change a configuration value.

        Args:
            key: Schema key.
            value: New value; must conform to the schema.
            persist: Write to the project file, drop any runtime override
                for the key, then reload. Otherwise the value becomes a
                runtime override for this process only and nothing on disk
                changes.

        Raises:
            UnknownKeyError: If the key is not in the schema.
            InvalidOverrideError: If the value does not conform.
            PersistenceError: If persist=True and the write fails.
        """
        self.schema.ensure_valid(key, value)

        if persist:
            with self._lock:
                self.persistence.save(self.config_path, {key: value})
                self.runtime.clear(key)
                self.reload()
            return

        self.runtime.set(key, value)
        if self.is_loaded:
            self._rebuild()

    def set_response_language(self, language: str) -> None:
        """Persist the response language to the project file."""
        self.set(RESPONSE_LANGUAGE_KEY, language, persist=True)

    def save(self, changes: Mapping[str, Any] | None = None) -> None:
        """Persist a fragment to the project file and reload.

        Args:
            changes: Keys to write. Defaults to the current runtime
                overrides. Overrides for every written key are cleared.

        Raises:
            UnknownKeyError / InvalidOverrideError: If a change is invalid
                (nothing is written).
            PersistenceError: If the write fails.
        """
        to_write = self.runtime.snapshot() if changes is None else dict(changes)
        for key, value in to_write.items():
            self.schema.ensure_valid(key, value)

        with self._lock:
            self.persistence.save(self.config_path, to_write)
            for key in to_write:
                self.runtime.clear(key)
            self.reload()

    def unset(self, key: str) -> bool:
        """Remove a key from the project file and reload.

        Returns:
            True if the key was present in the file.

        Raises:
            UnknownKeyError: If the key is not in the schema.
            PersistenceError: If the file cannot be rewritten.
        """
        self.schema.descriptor(key)
        with self._lock:
            removed = self.persistence.remove(self.config_path, [key])
            self.reload()
        return bool(removed)

    def clear_override(self, key: str) -> None:
        """Drop the runtime override for a key."""
        self.schema.descriptor(key)
        self.runtime.clear(key)
        if self.is_loaded:
            self._rebuild()

    def clear_overrides(self) -> None:
        """Drop every runtime override."""
        self.runtime.clear_all()
        if self.is_loaded:
            self._rebuild()

    def reset(self) -> LoadResult:
        """Delete the project file and state file, drop runtime overrides and reload."""
        with self._lock:
            self.persistence.delete(self.config_path)
            self.tag_state.clear()
            self.runtime.clear_all()
            return self.load()

    # ==================== Internals ====================

    def _all_layers(self) -> list[tuple[ConfigSource, dict[str, Any]]]:
        return [*self._layers, (ConfigSource.RUNTIME, self.runtime.snapshot())]

    def _rebuild(self) -> None:
        """Re-merge cached source fragments with the current overrides."""
        outcome = self.merger.merge_sources(self._all_layers())
        self._config = outcome.config
        self._origins = outcome.origins
        self._unknown_keys = outcome.unknown_keys
        default_tag = self._config.get(DEFAULT_TAG_KEY)
        if not isinstance(default_tag, str) or not default_tag:
            default_tag = DEFAULT_TAG
        self.tag_state.default_tag = default_tag
        self._state = ConfigState.LOADED

    def _require_loaded(self) -> None:
        if not self.is_loaded:
            raise ConfigNotLoadedError()


def get_config_manager(project_root: Path | None = None) -> ConfigManager:
    """Get a loaded ConfigManager instance.

    Args:
        project_root: Project root directory (defaults to current directory)

    Returns:
        ConfigManager with configuration loaded
    """
    return ConfigManager.create(project_root)
