"""Tests for the environment configuration source."""

import pytest

from taskmaster_config.config.defaults import DEFAULT_SCHEMA
from taskmaster_config.models.enums import ConfigSource
from taskmaster_config.models.schema import ConfigSchema
from taskmaster_config.services.environment_provider import EnvironmentConfigProvider


class TestRead:
    """Tests for EnvironmentConfigProvider.read()."""

    def test_empty_environment_gives_empty_fragment(self) -> None:
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={})

        assert provider.read() == {}
        assert provider.warnings == []

    def test_values_are_coerced_to_declared_types(self) -> None:
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA,
            environ={
                "TASKMASTER_MODEL_MAIN": "gpt-4o",
                "TASKMASTER_RETRY_ATTEMPTS": "7",
                "TASKMASTER_WORKFLOW_ENABLEAUTOPILOT": "true",
                "TASKMASTER_SECURITY_ALLOWEDFILEEXTENSIONS": ".md,.rst",
                "TASKMASTER_LOG_LEVEL": "DEBUG",
            },
        )

        assert provider.read() == {
            "models.main": "gpt-4o",
            "retry.attempts": 7,
            "workflow.enableAutopilot": True,
            "security.allowedFileExtensions": [".md", ".rst"],
            "logging.level": "debug",
        }

    def test_empty_variable_is_ignored(self) -> None:
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={"TASKMASTER_MODEL_MAIN": ""})

        assert provider.read() == {}

    @pytest.mark.parametrize("raw", ["   ", "\t", "\n", " \t\n "])
    def test_blank_variable_is_ignored(self, raw: str) -> None:
        """Whitespace-only values count as unset, not as values or errors."""
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA,
            environ={"TASKMASTER_MODEL_MAIN": raw, "TASKMASTER_RETRY_ATTEMPTS": raw},
        )

        assert provider.read() == {}
        assert provider.warnings == []

    def test_invalid_value_is_skipped_with_warning(self) -> None:
        """A bad variable never fails the read; it only produces a warning."""
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA,
            environ={
                "TASKMASTER_RETRY_ATTEMPTS": "lots",
                "TASKMASTER_STORAGE_TYPE": "cloud",
                "TASKMASTER_MODEL_MAIN": "gpt-4o",
            },
        )

        fragment = provider.read()

        assert fragment == {"models.main": "gpt-4o"}
        assert {w.key for w in provider.warnings} == {"retry.attempts", "storage.type"}
        assert all(w.source == ConfigSource.ENVIRONMENT for w in provider.warnings)
        assert any("TASKMASTER_RETRY_ATTEMPTS" in w.reason for w in provider.warnings)

    def test_out_of_range_value_is_skipped(self) -> None:
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA, environ={"TASKMASTER_TASKS_MAXSUBTASKS": "0"}
        )

        assert provider.read() == {}
        assert len(provider.warnings) == 1

    def test_warnings_reset_between_reads(self) -> None:
        environ = {"TASKMASTER_RETRY_ATTEMPTS": "lots"}
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ=environ)
        provider.read()
        assert provider.warnings

        environ["TASKMASTER_RETRY_ATTEMPTS"] = "4"
        assert provider.read() == {"retry.attempts": 4}
        assert provider.warnings == []

    def test_unprefixed_schema(self, small_schema: ConfigSchema) -> None:
        provider = EnvironmentConfigProvider(small_schema, environ={"LOGLEVEL": "debug"})

        assert provider.read() == {"logLevel": "debug"}

    def test_defaults_to_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TASKMASTER_TAGS_DEFAULTTAG", "feature")
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA)

        assert provider.read() == {"tags.defaultTag": "feature"}


class TestIntrospection:
    """Tests for variable name helpers."""

    def test_mappings_cover_every_key(self) -> None:
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={})
        mappings = provider.mappings()

        assert set(mappings) == set(DEFAULT_SCHEMA.keys())
        assert mappings["storage.apiEndpoint"] == "TASKMASTER_API_ENDPOINT"

    def test_is_set(self) -> None:
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA, environ={"TASKMASTER_RESPONSE_LANGUAGE": "German"}
        )

        assert provider.is_set("custom.responseLanguage")
        assert not provider.is_set("models.main")

    def test_blank_variable_is_not_set(self) -> None:
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA, environ={"TASKMASTER_MODEL_MAIN": "  "}
        )

        assert not provider.is_set("models.main")

    def test_list_prefixed_includes_unmapped_variables(self) -> None:
        provider = EnvironmentConfigProvider(
            DEFAULT_SCHEMA,
            environ={"TASKMASTER_MODLE_MAIN": "typo", "PATH": "/usr/bin"},
        )

        assert provider.list_prefixed() == {"TASKMASTER_MODLE_MAIN": "typo"}


class TestActiveTag:
    """Tests for EnvironmentConfigProvider.read_active_tag()."""

    def test_unset(self) -> None:
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={})

        assert provider.read_active_tag() is None

    def test_value_is_stripped(self) -> None:
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={"TASKMASTER_TAG": " dev "})

        assert provider.read_active_tag() == "dev"

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_is_unset(self, raw: str) -> None:
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={"TASKMASTER_TAG": raw})

        assert provider.read_active_tag() is None

    def test_not_part_of_config_fragment(self) -> None:
        """The active tag is runtime state, never a configuration key."""
        provider = EnvironmentConfigProvider(DEFAULT_SCHEMA, environ={"TASKMASTER_TAG": "dev"})

        assert provider.read() == {}
