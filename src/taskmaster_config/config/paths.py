"""Path constants for taskmaster-config.

This module defines the directory structure and file names the engine
reads and writes. All paths are relative to the project root.
"""

# =============================================================================
# Core Directory Structure
# =============================================================================

TASKMASTER_DIR = ".taskmaster"
CONFIG_FILENAME = "config.yaml"
LEGACY_CONFIG_FILENAME = "config.json"
CONFIG_FILE = f"{TASKMASTER_DIR}/{CONFIG_FILENAME}"
LEGACY_CONFIG_FILE = f"{TASKMASTER_DIR}/{LEGACY_CONFIG_FILENAME}"

# =============================================================================
# Backups
# =============================================================================

BACKUPS_DIRNAME = "backups"
BACKUP_PREFIX = "config-"

# Suffix used for the temporary file written next to the config before
# it is atomically moved into place.
TEMP_SUFFIX = ".tmp"

# Suffixes parsed/written as JSON instead of YAML
JSON_SUFFIXES = frozenset({".json"})

# =============================================================================
# Runtime State
# =============================================================================

# Active tag and other runtime state, kept apart from the config file
STATE_FILENAME = "state.json"
STATE_FILE = f"{TASKMASTER_DIR}/{STATE_FILENAME}"
