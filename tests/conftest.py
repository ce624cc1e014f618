"""Pytest configuration and fixtures for taskmaster-config tests."""

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml

from taskmaster_config.config.paths import CONFIG_FILE, STATE_FILE, TASKMASTER_DIR
from taskmaster_config.config.settings import EngineSettings
from taskmaster_config.models.enums import ValueType
from taskmaster_config.models.schema import ConfigSchema, KeyDescriptor


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove TASKMASTER_* variables so the host environment never leaks in."""
    for name in list(os.environ):
        if name.startswith("TASKMASTER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a temporary project with an empty .taskmaster directory.

    Returns:
        Path to project root
    """
    (tmp_path / TASKMASTER_DIR).mkdir()
    return tmp_path


@pytest.fixture
def config_file(project_dir: Path) -> Path:
    """Path of the project config file (not created)."""
    return project_dir / CONFIG_FILE


@pytest.fixture
def state_file(project_dir: Path) -> Path:
    """Path of the runtime state file (not created)."""
    return project_dir / STATE_FILE


@pytest.fixture
def write_config(config_file: Path) -> Callable[[dict[str, Any]], Path]:
    """Write a nested document to the project config file."""

    def _write(data: dict[str, Any]) -> Path:
        config_file.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return config_file

    return _write


@pytest.fixture
def read_config(config_file: Path) -> Callable[[], dict[str, Any]]:
    """Read the project config file back as a nested document."""

    def _read() -> dict[str, Any]:
        return yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}

    return _read


@pytest.fixture
def engine_settings() -> EngineSettings:
    """Engine settings with backups disabled."""
    return EngineSettings(backup_on_save=False, max_backups=3)


@pytest.fixture
def small_schema() -> ConfigSchema:
    """Two-key schema with no environment prefix.

    ``retries`` maps to RETRIES and ``logLevel`` to LOGLEVEL.
    """
    return ConfigSchema(
        [
            KeyDescriptor(path="retries", value_type=ValueType.INTEGER, default=3),
            KeyDescriptor(
                path="logLevel",
                value_type=ValueType.ENUM,
                default="info",
                allowed=("debug", "info", "warn"),
            ),
        ],
        env_prefix="",
    )


@pytest.fixture
def chdir_project(project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Run the test from inside the temporary project."""
    monkeypatch.chdir(project_dir)
    yield project_dir
