"""Constants for taskmaster-config.

This module contains:
- VERSION: Package version
- Default values for the built-in configuration schema
- Valid value sets for enum-like keys
- Environment variable naming and coercion vocabulary

For paths, messages, and runtime settings, import from:
- taskmaster_config.config.paths
- taskmaster_config.config.messages
- taskmaster_config.config.settings

For type-safe enums, import from:
- taskmaster_config.models.enums
"""

from taskmaster_config import __version__

# =============================================================================
# Version
# =============================================================================

VERSION = __version__

# Version of the built-in schema table. Bumped whenever keys are added,
# removed or change type.
SCHEMA_VERSION = 1

# =============================================================================
# Environment Variables
# =============================================================================

ENV_PREFIX = "TASKMASTER_"
ENV_PATH_SEPARATOR = "_"

TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
FALSE_STRINGS = frozenset({"0", "false", "no", "off"})
NULL_STRINGS = frozenset({"null", "none"})
LIST_SEPARATOR = ","

# Runtime state (not a schema key): overrides the active tag from state.json
ACTIVE_TAG_ENV_VAR = "TASKMASTER_TAG"

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_MODEL_MAIN = "claude-3-5-sonnet-20241022"
DEFAULT_MODEL_FALLBACK = "gpt-4o-mini"

DEFAULT_STORAGE_TYPE = "auto"
DEFAULT_STORAGE_ENCODING = "utf8"
DEFAULT_MAX_BACKUPS = 5

DEFAULT_TASK_PRIORITY = "medium"
DEFAULT_MAX_SUBTASKS = 20
DEFAULT_MAX_CONCURRENT_TASKS = 5

DEFAULT_TAG = "master"
DEFAULT_MAX_TAGS_PER_TASK = 10
DEFAULT_TAG_NAMING_CONVENTION = "kebab-case"

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_RETRY_MAX_DELAY_MS = 30000
DEFAULT_REQUEST_TIMEOUT_MS = 30000

DEFAULT_LOG_LEVEL = "info"

DEFAULT_ALLOWED_FILE_EXTENSIONS = (".txt", ".md", ".json")

DEFAULT_RESPONSE_LANGUAGE = "English"

DEFAULT_MAX_PHASE_ATTEMPTS = 3
DEFAULT_BRANCH_PATTERN = "task-{taskId}"

# =============================================================================
# Valid Value Sets
# =============================================================================

VALID_STORAGE_TYPES = ("file", "api", "auto")
VALID_TASK_PRIORITIES = ("low", "medium", "high", "critical")
VALID_TAG_NAMING_CONVENTIONS = ("kebab-case", "camelCase", "snake_case")
VALID_LOG_LEVELS = ("error", "warn", "info", "debug")

# Storage type that requires an API endpoint
STORAGE_TYPE_API = "api"

# Schema keys the config manager reads directly
DEFAULT_TAG_KEY = "tags.defaultTag"
RESPONSE_LANGUAGE_KEY = "custom.responseLanguage"

# =============================================================================
# Display
# =============================================================================

SECRET_MASK = "********"
JSON_INDENT = 2
