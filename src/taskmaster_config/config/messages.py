"""UI messages and strings for taskmaster-config.

This module consolidates all user-facing messages including:
- Success/error/info/warning messages
- Help text
"""

# =============================================================================
# Project Metadata
# =============================================================================

PROJECT_TAGLINE = "Layered configuration for Task Master"

HELP_TEXT = f"""
[bold cyan]tmc[/bold cyan] - {PROJECT_TAGLINE}

[bold]Commands:[/bold]
  [cyan]config show[/cyan]        Show the effective configuration and where each value comes from
  [cyan]config get[/cyan]         Print one effective value
  [cyan]config set[/cyan]         Write a value to .taskmaster/config.yaml
  [cyan]config unset[/cyan]       Remove a value from .taskmaster/config.yaml
  [cyan]config validate[/cyan]    Check the effective configuration against the schema
  [cyan]config reset[/cyan]       Delete .taskmaster/config.yaml and return to defaults
  [cyan]config backups[/cyan]     List config backups
  [cyan]config restore[/cyan]     Restore .taskmaster/config.yaml from a backup
  [cyan]config tag[/cyan]         Show or switch the active tag (.taskmaster/state.json)
  [cyan]version[/cyan]            Show version information

[bold]Precedence (lowest to highest):[/bold]
  defaults < .taskmaster/config.yaml < TASKMASTER_* environment variables < runtime overrides
"""

# =============================================================================
# Success Messages
# =============================================================================

SUCCESS_MESSAGES = {
    "value_set": "Set {key} = {value}",
    "value_unset": "Removed {key} from {path}",
    "config_valid": "Configuration is valid",
    "config_reset": "Configuration reset to defaults",
    "backup_restored": "Restored {name}",
    "active_tag_set": "Active tag set to {tag}",
}

# =============================================================================
# Error Messages
# =============================================================================

ERROR_MESSAGES = {
    "generic_error": "An error occurred: {error}",
    "unknown_key": "Unknown configuration key: {key}",
    "invalid_value": "Invalid value for {key}: {reason}",
    "config_invalid": "Configuration is invalid",
    "backup_not_found": "Backup not found: {name}",
    "invalid_tag": "Tag name must be a non-empty string",
    "state_write_failed": "Failed to save runtime state to {path}: {error}",
}

# =============================================================================
# Info Messages
# =============================================================================

INFO_MESSAGES = {
    "no_backups": "No backups found.",
    "not_persisted": "{key} is not set in {path}",
    "overridden": "Note: {key} is currently taken from {source}, not the project file",
    "cancelled": "Cancelled.",
    "tag_from_env": "Note: the active tag is forced by {env_var}",
}

# =============================================================================
# Warning Messages
# =============================================================================

WARNING_MESSAGES = {
    "config_read_failed": "Failed to read config from {path}: {error}",
    "config_parse_failed": "Failed to parse config from {path}: {error}",
    "config_not_mapping": "Config file {path} does not contain a mapping",
    "env_invalid": "Invalid value for {env_var}: {error}",
    "unknown_key_ignored": "Unknown key {key} in {path} is ignored",
    "secret_in_file": (
        "Secret stored in the project file; prefer the {env_var} environment variable"
    ),
    "state_read_failed": "Failed to read runtime state from {path}: {error}",
    "state_not_mapping": "Runtime state file {path} does not contain an object",
    "reset_confirm": "Delete {path} and reset all settings and the active tag to defaults?",
}
