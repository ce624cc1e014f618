"""Configuration commands for taskmaster-config.

Commands for inspecting and editing the layered Task Master configuration.
Reads always show the effective value (after defaults, the project file,
environment variables and runtime overrides are merged); writes always go
to the project file.
"""

import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from taskmaster_config.config.messages import (
    ERROR_MESSAGES,
    INFO_MESSAGES,
    SUCCESS_MESSAGES,
    WARNING_MESSAGES,
)
from taskmaster_config.constants import ACTIVE_TAG_ENV_VAR, JSON_INDENT, SECRET_MASK
from taskmaster_config.exceptions import ConfigError, PersistenceError
from taskmaster_config.models.enums import ConfigSource
from taskmaster_config.services.config_manager import ConfigManager, get_config_manager
from taskmaster_config.utils import (
    get_project_root,
    print_error,
    print_info,
    print_success,
    print_warning,
    unflatten,
)

logger = logging.getLogger(__name__)

console = Console()

config_app = typer.Typer(
    name="config",
    help="Inspect and edit Task Master configuration",
    no_args_is_help=True,
)

# Source column colors for `config show`
_SOURCE_STYLES = {
    ConfigSource.DEFAULTS: "dim",
    ConfigSource.PERSISTED: "green",
    ConfigSource.ENVIRONMENT: "yellow",
    ConfigSource.RUNTIME: "magenta",
}


def _project_root() -> Path:
    return get_project_root() or Path.cwd()


def _load_manager(report_warnings: bool = True) -> ConfigManager:
    manager = get_config_manager(_project_root())
    result = manager.last_load_result
    if report_warnings and result is not None:
        for warning in result.warnings:
            print_warning(escape(str(warning)))
    return manager


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _mask(manager: ConfigManager, key: str, value: Any) -> Any:
    if value is not None and manager.schema.is_secret(key):
        return SECRET_MASK
    return value


def _display_value(manager: ConfigManager, key: str, value: Any) -> str:
    return _format_value(_mask(manager, key, value))


def _require_key(manager: ConfigManager, key: str) -> None:
    if key not in manager.schema:
        print_error(ERROR_MESSAGES["unknown_key"].format(key=key))
        raise typer.Exit(code=1)


@config_app.command("show")
def config_show(
    as_json: bool = typer.Option(False, "--json", help="Output nested JSON instead of a table"),
) -> None:
    """Show the effective configuration and where each value comes from.

    Secret values are masked.

    Examples:
        tmc config show
        tmc config show --json
    """
    manager = _load_manager(report_warnings=not as_json)
    config = manager.as_dict()

    if as_json:
        masked = {key: _mask(manager, key, value) for key, value in config.items()}
        typer.echo(json.dumps(unflatten(masked), indent=JSON_INDENT))
        return

    table = Table(title=f"Configuration ({manager.config_path})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source")

    for key, value in config.items():
        source = manager.origin(key)
        style = _SOURCE_STYLES[source]
        table.add_row(
            key,
            escape(_display_value(manager, key, value)),
            f"[{style}]{source.value}[/{style}]",
        )

    console.print(table)


@config_app.command("get")
def config_get(
    key: str = typer.Argument(..., help="Configuration key (e.g., models.main)"),
) -> None:
    """Print the effective value of one key.

    Strings are printed as-is, everything else as JSON.

    Examples:
        tmc config get models.main
        tmc config get security.allowedFileExtensions
    """
    manager = _load_manager()
    _require_key(manager, key)
    typer.echo(_format_value(manager.get(key)))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key (e.g., models.main)"),
    value: str = typer.Argument(..., help="New value (converted to the key's type)"),
) -> None:
    """Write a value to the project config file.

    The value is converted like an environment variable: "true"/"false"
    for booleans, comma-separated lists, "null" to clear an optional key.

    Examples:
        tmc config set models.main gpt-4o
        tmc config set retry.attempts 5
        tmc config set security.allowedFileExtensions .md,.txt
    """
    manager = _load_manager()
    _require_key(manager, key)

    descriptor = manager.schema.descriptor(key)
    try:
        parsed = descriptor.coerce(value)
    except ValueError as e:
        print_error(ERROR_MESSAGES["invalid_value"].format(key=key, reason=e))
        raise typer.Exit(code=1) from e

    try:
        manager.set(key, parsed, persist=True)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    display = escape(_display_value(manager, key, parsed))
    print_success(SUCCESS_MESSAGES["value_set"].format(key=key, value=display))

    source = manager.origin(key)
    if source != ConfigSource.PERSISTED:
        print_info(INFO_MESSAGES["overridden"].format(key=key, source=source.value))


@config_app.command("unset")
def config_unset(
    key: str = typer.Argument(..., help="Configuration key to remove from the project file"),
) -> None:
    """Remove a key from the project config file.

    The key falls back to its environment or default value.

    Examples:
        tmc config unset models.research
    """
    manager = _load_manager()
    _require_key(manager, key)

    try:
        removed = manager.unset(key)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if removed:
        print_success(SUCCESS_MESSAGES["value_unset"].format(key=key, path=manager.config_path))
    else:
        print_info(INFO_MESSAGES["not_persisted"].format(key=key, path=manager.config_path))


@config_app.command("validate")
def config_validate() -> None:
    """Check the effective configuration against the schema.

    Exits with code 1 if there are errors. Warnings are reported but do
    not fail validation.
    """
    manager = _load_manager()
    result = manager.validate()

    for issue in result.errors:
        console.print(escape(str(issue)))
    for issue in result.warnings:
        console.print(escape(str(issue)))

    if not result.valid:
        print_error(ERROR_MESSAGES["config_invalid"])
        raise typer.Exit(code=1)

    print_success(SUCCESS_MESSAGES["config_valid"])


@config_app.command("tag")
def config_tag(
    name: str | None = typer.Argument(None, help="Tag to make active (omit to show it)"),
) -> None:
    """Show or switch the active tag.

    The active tag is stored in .taskmaster/state.json, not in the config
    file. TASKMASTER_TAG overrides it.

    Examples:
        tmc config tag
        tmc config tag feature-x
    """
    manager = _load_manager()

    if name is not None:
        try:
            manager.set_active_tag(name)
        except ConfigError as e:
            print_error(escape(str(e)))
            raise typer.Exit(code=1) from e
        print_success(SUCCESS_MESSAGES["active_tag_set"].format(tag=escape(name.strip())))
    else:
        typer.echo(manager.get_active_tag())

    if manager.tag_state.forced_by_env:
        print_info(INFO_MESSAGES["tag_from_env"].format(env_var=ACTIVE_TAG_ENV_VAR))


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Delete the project config file so every key returns to its default.

    The active tag state is cleared too. Environment variables still apply
    after a reset.
    """
    manager = ConfigManager(_project_root())
    path = manager.config_path

    if not force:
        confirm = typer.confirm(WARNING_MESSAGES["reset_confirm"].format(path=path))
        if not confirm:
            print_info(INFO_MESSAGES["cancelled"])
            return

    try:
        manager.reset()
    except PersistenceError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(SUCCESS_MESSAGES["config_reset"])


@config_app.command("backups")
def config_backups() -> None:
    """List backups of the project config file, newest first."""
    manager = ConfigManager(_project_root())
    names = manager.persistence.list_backups(manager.config_path)
    if not names:
        print_info(INFO_MESSAGES["no_backups"])
        return

    for name in names:
        console.print(escape(name))


@config_app.command("restore")
def config_restore(
    name: str = typer.Argument(..., help="Backup file name (see 'tmc config backups')"),
) -> None:
    """Replace the project config file with a backup.

    Examples:
        tmc config restore config-20250101T120000000000Z.yaml
    """
    manager = ConfigManager(_project_root())
    persistence = manager.persistence

    if name not in persistence.list_backups(manager.config_path):
        print_error(ERROR_MESSAGES["backup_not_found"].format(name=name))
        raise typer.Exit(code=1)

    try:
        persistence.restore_backup(manager.config_path, name)
    except PersistenceError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(SUCCESS_MESSAGES["backup_restored"].format(name=name))

