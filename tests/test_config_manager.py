"""Tests for the ConfigManager facade.

Covers the end-to-end behaviour of layered configuration: precedence,
defaults, idempotent loading, malformed-file resilience, runtime
overrides, persisted round-trips and validation.
"""

import json
from pathlib import Path

import pytest
import yaml

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.config.paths import CONFIG_FILE, LEGACY_CONFIG_FILE
from taskmaster_config.exceptions import (
    ConfigNotLoadedError,
    InvalidOverrideError,
    PersistenceError,
    UnknownKeyError,
)
from taskmaster_config.models.config import ModelConfig
from taskmaster_config.models.enums import ConfigSource, ConfigState
from taskmaster_config.models.schema import ConfigSchema
from taskmaster_config.services.config_manager import ConfigManager, get_config_manager


def _manager(project_dir: Path, environ: dict[str, str] | None = None, **kwargs) -> ConfigManager:
    return ConfigManager.create(project_dir, environ=environ or {}, **kwargs)


class TestScenarios:
    """Two-key schema with an unprefixed environment."""

    def test_file_and_environment_combine(
        self, project_dir: Path, small_schema: ConfigSchema, write_config
    ) -> None:
        write_config({"retries": 5})

        manager = _manager(project_dir, {"LOGLEVEL": "debug"}, schema=small_schema)

        assert manager.as_dict() == {"retries": 5, "logLevel": "debug"}

    def test_persisted_set_survives_reload(
        self, project_dir: Path, small_schema: ConfigSchema, write_config, read_config
    ) -> None:
        write_config({"retries": 5, "logLevel": "warn"})
        manager = _manager(project_dir, {"LOGLEVEL": "debug"}, schema=small_schema)

        manager.set("retries", 10, persist=True)
        manager.reload()

        assert manager.get("retries") == 10
        assert read_config() == {"retries": 10, "logLevel": "warn"}


class TestLoading:
    """Tests for load() and reload()."""

    def test_defaults_when_no_sources(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        for descriptor in DEFAULT_SCHEMA:
            assert manager.get(descriptor.path) == descriptor.default_value()
            assert manager.origin(descriptor.path) == ConfigSource.DEFAULTS

    def test_load_reports_contributing_sources(self, project_dir: Path, write_config) -> None:
        write_config({"models": {"main": "gpt-4o"}})
        manager = ConfigManager(project_dir, environ={"TASKMASTER_LOG_LEVEL": "debug"})

        result = manager.load()

        assert result.success
        assert result.sources == [
            ConfigSource.DEFAULTS,
            ConfigSource.PERSISTED,
            ConfigSource.ENVIRONMENT,
        ]
        assert manager.state == ConfigState.LOADED

    def test_load_is_idempotent(self, project_dir: Path, write_config) -> None:
        write_config({"retry": {"attempts": 4}, "models": {"main": "gpt-4o"}})
        manager = ConfigManager(project_dir, environ={"TASKMASTER_TAGS_DEFAULTTAG": "dev"})

        manager.load()
        first = manager.as_dict()
        manager.load()

        assert manager.as_dict() == first
        assert list(manager.as_dict()) == list(first)

    def test_environment_beats_file(self, project_dir: Path, write_config) -> None:
        write_config({"models": {"main": "from-file"}})

        manager = _manager(project_dir, {"TASKMASTER_MODEL_MAIN": "from-env"})

        assert manager.get("models.main") == "from-env"
        assert manager.origin("models.main") == ConfigSource.ENVIRONMENT

    def test_malformed_file_falls_back(self, project_dir: Path, config_file: Path) -> None:
        config_file.write_text("models: [unclosed\n", encoding="utf-8")
        environ = {"TASKMASTER_RETRY_ATTEMPTS": "6"}

        manager = ConfigManager(project_dir, environ=environ)
        result = manager.load()

        expected = DEFAULT_SCHEMA.defaults()
        expected["retry.attempts"] = 6
        assert result.success
        assert result.has_warnings
        assert result.warnings[0].source == ConfigSource.PERSISTED
        assert manager.as_dict() == expected

    def test_invalid_environment_value_keeps_lower_layer(
        self, project_dir: Path, write_config
    ) -> None:
        write_config({"retry": {"attempts": 4}})

        manager = ConfigManager(project_dir, environ={"TASKMASTER_RETRY_ATTEMPTS": "many"})
        result = manager.load()

        assert manager.get("retry.attempts") == 4
        assert [w.key for w in result.warnings] == ["retry.attempts"]

    def test_unknown_file_keys_are_ignored_with_warning(
        self, project_dir: Path, write_config
    ) -> None:
        write_config({"experimental": {"flag": True}})

        manager = ConfigManager(project_dir, environ={})
        result = manager.load()

        assert manager.unknown_keys == ["experimental.flag"]
        assert [w.key for w in result.warnings] == ["experimental.flag"]
        with pytest.raises(UnknownKeyError):
            manager.get("experimental.flag")

    def test_reload_picks_up_file_changes(self, project_dir: Path, write_config) -> None:
        manager = _manager(project_dir)
        write_config({"tags": {"defaultTag": "release"}})

        assert manager.get("tags.defaultTag") == "master"
        manager.reload()
        assert manager.get("tags.defaultTag") == "release"

    def test_legacy_json_project(self, project_dir: Path) -> None:
        legacy = project_dir / LEGACY_CONFIG_FILE
        legacy.write_text('{"storage": {"type": "file"}}', encoding="utf-8")

        manager = _manager(project_dir)
        manager.set("models.main", "gpt-4o", persist=True)

        assert manager.config_path == legacy
        assert manager.get("storage.type") == "file"
        assert not (project_dir / CONFIG_FILE).exists()
        assert '"main": "gpt-4o"' in legacy.read_text()


class TestAccess:
    """Tests for get() and the read helpers."""

    def test_get_before_load(self, project_dir: Path) -> None:
        manager = ConfigManager(project_dir, environ={})

        assert manager.state == ConfigState.UNINITIALIZED
        with pytest.raises(ConfigNotLoadedError):
            manager.get("models.main")

    def test_get_unknown_key(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        with pytest.raises(UnknownKeyError):
            manager.get("models.nope")

    def test_get_returns_copy(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        manager.get("security.allowedFileExtensions").append(".exe")

        assert ".exe" not in manager.get("security.allowedFileExtensions")

    def test_get_never_reloads(self, project_dir: Path, write_config) -> None:
        manager = _manager(project_dir)
        write_config({"models": {"main": "changed"}})

        assert manager.get("models.main") == DEFAULT_SCHEMA.descriptor("models.main").default

    def test_as_dict_nested(self, project_dir: Path) -> None:
        nested = _manager(project_dir).as_dict(nested=True)

        assert nested["retry"]["attempts"] == 3
        assert nested["models"]["research"] is None

    def test_get_section(self, project_dir: Path) -> None:
        manager = _manager(project_dir, {"TASKMASTER_MODEL_RESEARCH": "sonar"})

        assert manager.get_section("models") == {
            "main": "claude-3-5-sonnet-20241022",
            "research": "sonar",
            "fallback": "gpt-4o-mini",
        }
        assert manager.get_section("nothing") == {}

    def test_get_model_config(self, project_dir: Path) -> None:
        models = _manager(project_dir).get_model_config()

        assert isinstance(models, ModelConfig)
        assert models.fallback == "gpt-4o-mini"

    def test_storage_config_for_file_storage_hides_api(self, project_dir: Path) -> None:
        manager = _manager(
            project_dir,
            {"TASKMASTER_STORAGE_TYPE": "file", "TASKMASTER_API_ENDPOINT": "https://api.test"},
        )

        storage = manager.get_storage_config()

        assert storage.type == "file"
        assert storage.base_path == project_dir
        assert storage.api_endpoint is None
        assert storage.api_configured is False

    def test_storage_config_for_api_storage(self, project_dir: Path) -> None:
        manager = _manager(
            project_dir,
            {"TASKMASTER_STORAGE_TYPE": "api", "TASKMASTER_API_TOKEN": "secret"},
        )

        storage = manager.get_storage_config()

        assert storage.api_access_token == "secret"
        assert storage.api_configured is True

    def test_response_language(self, project_dir: Path) -> None:
        manager = _manager(project_dir, {"TASKMASTER_RESPONSE_LANGUAGE": "Deutsch"})

        assert manager.get_response_language() == "Deutsch"

    @pytest.mark.parametrize(
        "storage_type,expected", [("api", True), ("auto", False), ("file", False)]
    )
    def test_api_explicitly_configured(
        self, project_dir: Path, storage_type: str, expected: bool
    ) -> None:
        manager = _manager(project_dir, {"TASKMASTER_STORAGE_TYPE": storage_type})

        assert manager.is_api_explicitly_configured() is expected


class TestRuntimeOverrides:
    """Tests for set(..., persist=False) and override bookkeeping."""

    def test_override_visible_immediately_without_disk_change(
        self, project_dir: Path, config_file: Path
    ) -> None:
        manager = _manager(project_dir)

        manager.set("workflow.enableAutopilot", True)

        assert manager.get("workflow.enableAutopilot") is True
        assert manager.origin("workflow.enableAutopilot") == ConfigSource.RUNTIME
        assert not config_file.exists()

    def test_override_does_not_change_existing_file(self, project_dir: Path, write_config) -> None:
        path = write_config({"models": {"main": "a"}})
        before = path.read_bytes()
        manager = _manager(project_dir)

        manager.set("models.main", "b")

        assert manager.get("models.main") == "b"
        assert path.read_bytes() == before

    def test_override_beats_environment(self, project_dir: Path) -> None:
        manager = _manager(project_dir, {"TASKMASTER_MODEL_MAIN": "env"})

        manager.set("models.main", "runtime")

        assert manager.get("models.main") == "runtime"

    def test_overrides_survive_reload(self, project_dir: Path) -> None:
        manager = _manager(project_dir)
        manager.set("retry.attempts", 9)

        manager.reload()

        assert manager.get("retry.attempts") == 9

    def test_clear_override(self, project_dir: Path) -> None:
        manager = _manager(project_dir)
        manager.set("retry.attempts", 9)

        manager.clear_override("retry.attempts")

        assert manager.get("retry.attempts") == 3

    def test_clear_overrides(self, project_dir: Path) -> None:
        manager = _manager(project_dir)
        manager.set("retry.attempts", 9)
        manager.set("models.main", "x")

        manager.clear_overrides()

        assert manager.get("retry.attempts") == 3
        assert manager.origin("models.main") == ConfigSource.DEFAULTS

    def test_set_before_load_applies_on_load(self, project_dir: Path) -> None:
        manager = ConfigManager(project_dir, environ={})
        manager.set("tags.defaultTag", "early")

        manager.load()

        assert manager.get("tags.defaultTag") == "early"

    def test_invalid_value_rejected(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        with pytest.raises(InvalidOverrideError):
            manager.set("retry.attempts", "three")
        with pytest.raises(InvalidOverrideError):
            manager.set("storage.type", "s3", persist=True)

        assert manager.get("retry.attempts") == 3
        assert not manager.config_path.exists()

    def test_unknown_key_rejected(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        with pytest.raises(UnknownKeyError):
            manager.set("no.such.key", 1)


class TestPersistence:
    """Tests for durable changes through the manager."""

    def test_persisted_set_round_trips(self, project_dir: Path, write_config, read_config) -> None:
        write_config({"models": {"main": "a"}, "tags": {"defaultTag": "dev"}})
        manager = _manager(project_dir)

        manager.set("retry.attempts", 7, persist=True)
        manager.reload()

        assert manager.get("retry.attempts") == 7
        assert manager.get("models.main") == "a"
        assert manager.get("tags.defaultTag") == "dev"
        assert read_config() == {
            "models": {"main": "a"},
            "tags": {"defaultTag": "dev"},
            "retry": {"attempts": 7},
        }

    def test_persisted_set_preserves_unknown_keys(
        self, project_dir: Path, write_config, read_config
    ) -> None:
        write_config({"experimental": {"flag": True}})
        manager = _manager(project_dir)

        manager.set("models.main", "gpt-4o", persist=True)

        assert read_config()["experimental"] == {"flag": True}

    def test_persisted_set_shadowed_by_environment(self, project_dir: Path, read_config) -> None:
        manager = _manager(project_dir, {"TASKMASTER_MODEL_MAIN": "env"})

        manager.set("models.main", "file", persist=True)

        assert read_config() == {"models": {"main": "file"}}
        assert manager.get("models.main") == "env"

    def test_persisted_set_replaces_runtime_override(
        self, project_dir: Path, read_config
    ) -> None:
        manager = _manager(project_dir)
        manager.set("retry.attempts", 7)

        manager.set("retry.attempts", 10, persist=True)
        manager.reload()

        assert manager.get("retry.attempts") == 10
        assert manager.origin("retry.attempts") == ConfigSource.PERSISTED
        assert "retry.attempts" not in manager.runtime
        assert read_config() == {"retry": {"attempts": 10}}

    def test_persisted_set_keeps_other_overrides(self, project_dir: Path) -> None:
        manager = _manager(project_dir)
        manager.set("models.main", "runtime")

        manager.set("retry.attempts", 10, persist=True)

        assert manager.get("models.main") == "runtime"
        assert manager.origin("models.main") == ConfigSource.RUNTIME

    def test_persist_into_unparsable_file_fails(self, project_dir: Path, config_file: Path) -> None:
        config_file.write_text("models: [unclosed\n", encoding="utf-8")
        manager = _manager(project_dir)

        with pytest.raises(PersistenceError):
            manager.set("models.main", "x", persist=True)

        assert config_file.read_text() == "models: [unclosed\n"

    def test_save_runtime_overrides(self, project_dir: Path, read_config) -> None:
        manager = _manager(project_dir)
        manager.set("models.main", "gpt-4o")
        manager.set("retry.attempts", 2)

        manager.save()

        assert read_config() == {"models": {"main": "gpt-4o"}, "retry": {"attempts": 2}}
        assert manager.origin("models.main") == ConfigSource.PERSISTED
        assert len(manager.runtime) == 0

    def test_save_explicit_changes_keeps_overrides(self, project_dir: Path, read_config) -> None:
        manager = _manager(project_dir)
        manager.set("models.main", "runtime")

        manager.save({"tags.defaultTag": "dev"})

        assert read_config() == {"tags": {"defaultTag": "dev"}}
        assert manager.get("models.main") == "runtime"

    def test_save_explicit_changes_replaces_override_for_written_key(
        self, project_dir: Path, read_config
    ) -> None:
        manager = _manager(project_dir)
        manager.set("tags.defaultTag", "runtime")

        manager.save({"tags.defaultTag": "dev"})

        assert read_config() == {"tags": {"defaultTag": "dev"}}
        assert manager.get("tags.defaultTag") == "dev"
        assert manager.origin("tags.defaultTag") == ConfigSource.PERSISTED

    def test_set_response_language_persists(self, project_dir: Path, read_config) -> None:
        manager = _manager(project_dir)

        manager.set_response_language("German")

        assert manager.get_response_language() == "German"
        assert read_config() == {"custom": {"responseLanguage": "German"}}

    def test_save_validates_before_writing(self, project_dir: Path, config_file: Path) -> None:
        manager = _manager(project_dir)

        with pytest.raises(InvalidOverrideError):
            manager.save({"models.main": "ok", "retry.attempts": -1})

        assert not config_file.exists()

    def test_unset(self, project_dir: Path, write_config, read_config) -> None:
        write_config({"models": {"main": "a"}, "retry": {"attempts": 2}})
        manager = _manager(project_dir)

        assert manager.unset("models.main") is True
        assert manager.unset("models.main") is False
        assert manager.get("models.main") == "claude-3-5-sonnet-20241022"
        assert read_config() == {"retry": {"attempts": 2}}

    def test_reset(self, project_dir: Path, write_config, config_file: Path) -> None:
        write_config({"models": {"main": "a"}})
        manager = _manager(project_dir)
        manager.set("retry.attempts", 1)

        manager.reset()

        assert not config_file.exists()
        assert manager.as_dict() == DEFAULT_SCHEMA.defaults()


class TestActiveTag:
    """Tests for the active tag kept in state.json."""

    def test_defaults_to_default_tag(self, project_dir: Path, write_config) -> None:
        write_config({"tags": {"defaultTag": "main"}})

        manager = _manager(project_dir)

        assert manager.get_active_tag() == "main"

    def test_builtin_default(self, project_dir: Path) -> None:
        assert _manager(project_dir).get_active_tag() == "master"

    def test_custom_schema_without_tag_key(
        self, project_dir: Path, small_schema: ConfigSchema
    ) -> None:
        assert _manager(project_dir, schema=small_schema).get_active_tag() == "master"

    def test_set_active_tag_round_trips(self, project_dir: Path, state_file: Path) -> None:
        manager = _manager(project_dir)

        manager.set_active_tag("feature-x")

        assert manager.get_active_tag() == "feature-x"
        assert json.loads(state_file.read_text())["currentTag"] == "feature-x"
        assert _manager(project_dir).get_active_tag() == "feature-x"

    def test_active_tag_is_not_configuration(
        self, project_dir: Path, config_file: Path
    ) -> None:
        manager = _manager(project_dir)

        manager.set_active_tag("feature-x")

        assert not config_file.exists()
        assert manager.get("tags.defaultTag") == "master"

    def test_legacy_state_field(self, project_dir: Path, state_file: Path) -> None:
        state_file.write_text(json.dumps({"activeTag": "legacy"}), encoding="utf-8")

        assert _manager(project_dir).get_active_tag() == "legacy"

    def test_environment_forces_tag(self, project_dir: Path, state_file: Path) -> None:
        state_file.write_text(json.dumps({"currentTag": "stored"}), encoding="utf-8")

        manager = _manager(project_dir, {"TASKMASTER_TAG": "from-env"})

        assert manager.get_active_tag() == "from-env"

    def test_malformed_state_uses_default(self, project_dir: Path, state_file: Path) -> None:
        state_file.write_text("{not json", encoding="utf-8")

        manager = _manager(project_dir)

        assert manager.get_active_tag() == "master"
        assert manager.state == ConfigState.LOADED

    def test_default_follows_runtime_override(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        manager.set("tags.defaultTag", "dev")

        assert manager.get_active_tag() == "dev"

    @pytest.mark.parametrize("tag", ["", "   ", None, 5])
    def test_set_active_tag_rejects_invalid(self, project_dir: Path, tag: object) -> None:
        manager = _manager(project_dir)

        with pytest.raises(InvalidOverrideError):
            manager.set_active_tag(tag)

        assert manager.get_active_tag() == "master"

    def test_get_before_load_raises(self, project_dir: Path) -> None:
        with pytest.raises(ConfigNotLoadedError):
            ConfigManager(project_dir, environ={}).get_active_tag()

    def test_reset_clears_active_tag(self, project_dir: Path, state_file: Path) -> None:
        manager = _manager(project_dir)
        manager.set_active_tag("feature-x")

        manager.reset()

        assert not state_file.exists()
        assert manager.get_active_tag() == "master"


class TestValidation:
    """Tests for validate()."""

    def test_defaults_are_valid(self, project_dir: Path) -> None:
        manager = _manager(project_dir)

        result = manager.validate()

        assert result.valid
        assert result.errors == []
        assert manager.state == ConfigState.VALIDATED

    def test_validate_before_load_does_not_raise(self, project_dir: Path) -> None:
        result = ConfigManager(project_dir, environ={}).validate()

        assert not result.valid

    def test_invalid_file_values_reported(self, project_dir: Path, write_config) -> None:
        write_config(
            {
                "retry": {"attempts": "three"},
                "storage": {"type": "s3"},
                "tasks": {"maxSubtasks": 500},
            }
        )
        manager = _manager(project_dir)

        result = manager.validate()

        assert not result.valid
        assert result.error_keys == {"retry.attempts", "storage.type", "tasks.maxSubtasks"}
        assert manager.state == ConfigState.LOADED
        # Invalid values are still served
        assert manager.get("storage.type") == "s3"

    def test_cross_field_rule(self, project_dir: Path, write_config) -> None:
        write_config({"retry": {"delay": 5000, "maxDelay": 100}})

        result = _manager(project_dir).validate()

        assert result.error_keys == {"retry.delay"}

    def test_cross_field_rule_skipped_for_wrong_types(
        self, project_dir: Path, write_config
    ) -> None:
        write_config({"retry": {"delay": "soon"}})

        result = _manager(project_dir).validate()

        assert result.error_keys == {"retry.delay"}
        assert len(result.issues_for("retry.delay")) == 1

    def test_warnings_do_not_invalidate(self, project_dir: Path, write_config) -> None:
        write_config(
            {
                "storage": {"type": "api", "apiAccessToken": "tok"},
                "experimental": {"flag": True},
            }
        )

        result = _manager(project_dir).validate()

        assert result.valid
        warned = {issue.key for issue in result.warnings}
        assert warned == {"storage.apiEndpoint", "storage.apiAccessToken", "experimental.flag"}

    def test_secret_from_environment_not_flagged(self, project_dir: Path) -> None:
        result = _manager(project_dir, {"TASKMASTER_API_TOKEN": "tok"}).validate()

        assert result.issues_for("storage.apiAccessToken") == []

    def test_change_after_validate_returns_to_loaded(self, project_dir: Path) -> None:
        manager = _manager(project_dir)
        manager.validate()

        manager.set("retry.attempts", 1)

        assert manager.state == ConfigState.LOADED

    def test_custom_schema_rules(self, project_dir: Path, small_schema: ConfigSchema) -> None:
        manager = _manager(project_dir, {"RETRIES": "12"}, schema=small_schema)

        assert manager.validate().valid
        assert manager.get("retries") == 12


def test_get_config_manager_loads(project_dir: Path, write_config) -> None:
    write_config({"models": {"main": "gpt-4o"}})

    manager = get_config_manager(project_dir)

    assert manager.is_loaded
    assert manager.get("models.main") == "gpt-4o"


def test_file_written_as_yaml_mapping(project_dir: Path, config_file: Path) -> None:
    manager = _manager(project_dir)

    manager.set("security.allowedFileExtensions", [".md", ".txt"], persist=True)

    content = config_file.read_text()
    assert yaml.safe_load(content) == {"security": {"allowedFileExtensions": [".md", ".txt"]}}
    assert "[.md, .txt]" in content
