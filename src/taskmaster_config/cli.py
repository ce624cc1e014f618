"""Main CLI entry point for taskmaster-config."""

import logging
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console

from taskmaster_config.commands.config_cmd import config_app
from taskmaster_config.config.messages import HELP_TEXT, PROJECT_TAGLINE
from taskmaster_config.config.settings import engine_settings
from taskmaster_config.constants import SCHEMA_VERSION, VERSION
from taskmaster_config.utils import print_error, print_panel

# Load .env file from current directory if it exists
load_dotenv(Path.cwd() / ".env", verbose=False)

# Create main Typer app
app = typer.Typer(
    name="tmc",
    help=PROJECT_TAGLINE,
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# Add command groups
app.add_typer(config_app, name="config")

# Create console for output
console = Console()


def _configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else engine_settings.log_level.upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.command("version")
def version() -> None:
    """Show version information."""
    print_panel(
        f"[bold cyan]taskmaster-config[/bold cyan] version [green]{VERSION}[/green]\n"
        f"Schema version [green]{SCHEMA_VERSION}[/green]\n\n"
        f"{PROJECT_TAGLINE}",
        title="Version",
        style="cyan",
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version information",
        is_eager=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
    ),
) -> None:
    """tmc - layered configuration for Task Master.

    Values are resolved from built-in defaults, .taskmaster/config.yaml,
    TASKMASTER_* environment variables and runtime overrides, in that order.

    Get started:
        tmc config show            # Effective configuration
        tmc config set KEY VALUE   # Persist a value
        tmc config validate        # Check against the schema
    """
    _configure_logging(debug)

    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(HELP_TEXT)
        raise typer.Exit()


def cli_main() -> None:
    """Main entry point for the CLI.

    This is the function that gets called when running 'tmc' command.
    It handles exceptions and provides user-friendly error messages.
    """
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        if isinstance(e, typer.Exit):
            sys.exit(e.exit_code)

        from taskmaster_config.config.messages import ERROR_MESSAGES

        print_error(ERROR_MESSAGES["generic_error"].format(error=str(e)))

        # Show traceback in debug mode
        if "--debug" in sys.argv or "-d" in sys.argv:
            import traceback

            console.print("\n[dim]Traceback:[/dim]")
            traceback.print_exc()

        sys.exit(1)


if __name__ == "__main__":
    cli_main()
