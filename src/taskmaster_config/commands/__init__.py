"""CLI commands for taskmaster-config."""

from taskmaster_config.commands.config_cmd import config_app

__all__ = [
    "config_app",
]
