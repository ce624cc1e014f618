"""Built-in configuration schema for Task Master.

Every key the tool recognizes is declared here exactly once, with its
type, default and environment variable. Keys whose variable is not given
explicitly use the derived name (prefix + path, uppercased, dots as
underscores).
"""

from taskmaster_config.constants import (
    DEFAULT_ALLOWED_FILE_EXTENSIONS,
    DEFAULT_BRANCH_PATTERN,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_BACKUPS,
    DEFAULT_MAX_CONCURRENT_TASKS,
    DEFAULT_MAX_PHASE_ATTEMPTS,
    DEFAULT_MAX_SUBTASKS,
    DEFAULT_MAX_TAGS_PER_TASK,
    DEFAULT_MODEL_FALLBACK,
    DEFAULT_MODEL_MAIN,
    DEFAULT_REQUEST_TIMEOUT_MS,
    DEFAULT_RESPONSE_LANGUAGE,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_RETRY_MAX_DELAY_MS,
    DEFAULT_STORAGE_ENCODING,
    DEFAULT_STORAGE_TYPE,
    DEFAULT_TAG,
    DEFAULT_TAG_NAMING_CONVENTION,
    DEFAULT_TASK_PRIORITY,
    ENV_PREFIX,
    SCHEMA_VERSION,
    STORAGE_TYPE_API,
    VALID_LOG_LEVELS,
    VALID_STORAGE_TYPES,
    VALID_TAG_NAMING_CONVENTIONS,
    VALID_TASK_PRIORITIES,
)
from taskmaster_config.models.enums import IssueSeverity, ValueType
from taskmaster_config.models.schema import ConfigSchema, CrossFieldRule, KeyDescriptor

_KEYS = (
    # -------------------------------------------------------------------------
    # Models
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="models.main",
        value_type=ValueType.STRING,
        default=DEFAULT_MODEL_MAIN,
        env_var="TASKMASTER_MODEL_MAIN",
        description="Primary AI model",
    ),
    KeyDescriptor(
        path="models.research",
        value_type=ValueType.STRING,
        default=None,
        nullable=True,
        env_var="TASKMASTER_MODEL_RESEARCH",
        description="Model used for research-backed operations",
    ),
    KeyDescriptor(
        path="models.fallback",
        value_type=ValueType.STRING,
        default=DEFAULT_MODEL_FALLBACK,
        env_var="TASKMASTER_MODEL_FALLBACK",
        description="Model used when the primary model fails",
    ),
    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="storage.type",
        value_type=ValueType.ENUM,
        default=DEFAULT_STORAGE_TYPE,
        allowed=VALID_STORAGE_TYPES,
        env_var="TASKMASTER_STORAGE_TYPE",
        description="Task storage backend",
    ),
    KeyDescriptor(
        path="storage.apiEndpoint",
        value_type=ValueType.STRING,
        default=None,
        nullable=True,
        env_var="TASKMASTER_API_ENDPOINT",
        description="Remote storage API endpoint",
    ),
    KeyDescriptor(
        path="storage.apiAccessToken",
        value_type=ValueType.STRING,
        default=None,
        nullable=True,
        secret=True,
        env_var="TASKMASTER_API_TOKEN",
        description="Remote storage API access token",
    ),
    KeyDescriptor(
        path="storage.encoding",
        value_type=ValueType.STRING,
        default=DEFAULT_STORAGE_ENCODING,
        description="Text encoding for task files",
    ),
    KeyDescriptor(
        path="storage.enableBackup",
        value_type=ValueType.BOOLEAN,
        default=False,
        description="Back up task files before writing",
    ),
    KeyDescriptor(
        path="storage.maxBackups",
        value_type=ValueType.INTEGER,
        default=DEFAULT_MAX_BACKUPS,
        minimum=0,
        maximum=100,
        description="Number of task file backups to keep",
    ),
    KeyDescriptor(
        path="storage.atomicOperations",
        value_type=ValueType.BOOLEAN,
        default=True,
        description="Write task files atomically",
    ),
    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="tasks.defaultPriority",
        value_type=ValueType.ENUM,
        default=DEFAULT_TASK_PRIORITY,
        allowed=VALID_TASK_PRIORITIES,
        description="Priority given to new tasks",
    ),
    KeyDescriptor(
        path="tasks.maxSubtasks",
        value_type=ValueType.INTEGER,
        default=DEFAULT_MAX_SUBTASKS,
        minimum=1,
        maximum=100,
        description="Maximum subtasks generated per task",
    ),
    KeyDescriptor(
        path="tasks.maxConcurrentTasks",
        value_type=ValueType.INTEGER,
        default=DEFAULT_MAX_CONCURRENT_TASKS,
        minimum=1,
        maximum=50,
        description="Maximum tasks in progress at once",
    ),
    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="tags.defaultTag",
        value_type=ValueType.STRING,
        default=DEFAULT_TAG,
        description="Tag used when none is active",
    ),
    KeyDescriptor(
        path="tags.maxTagsPerTask",
        value_type=ValueType.INTEGER,
        default=DEFAULT_MAX_TAGS_PER_TASK,
        minimum=1,
        maximum=100,
        description="Maximum tags attached to a task",
    ),
    KeyDescriptor(
        path="tags.namingConvention",
        value_type=ValueType.ENUM,
        default=DEFAULT_TAG_NAMING_CONVENTION,
        allowed=VALID_TAG_NAMING_CONVENTIONS,
        description="Naming convention enforced for tag names",
    ),
    # -------------------------------------------------------------------------
    # Retry
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="retry.attempts",
        value_type=ValueType.INTEGER,
        default=DEFAULT_RETRY_ATTEMPTS,
        minimum=0,
        maximum=20,
        description="Retry attempts for provider requests",
    ),
    KeyDescriptor(
        path="retry.delay",
        value_type=ValueType.INTEGER,
        default=DEFAULT_RETRY_DELAY_MS,
        minimum=0,
        description="Initial retry delay in milliseconds",
    ),
    KeyDescriptor(
        path="retry.maxDelay",
        value_type=ValueType.INTEGER,
        default=DEFAULT_RETRY_MAX_DELAY_MS,
        minimum=0,
        description="Maximum retry delay in milliseconds",
    ),
    KeyDescriptor(
        path="retry.timeout",
        value_type=ValueType.INTEGER,
        default=DEFAULT_REQUEST_TIMEOUT_MS,
        minimum=1,
        description="Request timeout in milliseconds",
    ),
    # -------------------------------------------------------------------------
    # Logging, security, custom
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="logging.level",
        value_type=ValueType.ENUM,
        default=DEFAULT_LOG_LEVEL,
        allowed=VALID_LOG_LEVELS,
        env_var="TASKMASTER_LOG_LEVEL",
        description="Log verbosity",
    ),
    KeyDescriptor(
        path="security.allowedFileExtensions",
        value_type=ValueType.STRING_LIST,
        default=DEFAULT_ALLOWED_FILE_EXTENSIONS,
        description="File extensions accepted as input documents",
    ),
    KeyDescriptor(
        path="custom.responseLanguage",
        value_type=ValueType.STRING,
        default=DEFAULT_RESPONSE_LANGUAGE,
        env_var="TASKMASTER_RESPONSE_LANGUAGE",
        description="Language AI responses are written in",
    ),
    # -------------------------------------------------------------------------
    # Workflow
    # -------------------------------------------------------------------------
    KeyDescriptor(
        path="workflow.enableAutopilot",
        value_type=ValueType.BOOLEAN,
        default=False,
        description="Enable the autopilot workflow",
    ),
    KeyDescriptor(
        path="workflow.maxPhaseAttempts",
        value_type=ValueType.INTEGER,
        default=DEFAULT_MAX_PHASE_ATTEMPTS,
        minimum=1,
        maximum=10,
        description="Attempts per workflow phase before aborting",
    ),
    KeyDescriptor(
        path="workflow.branchPattern",
        value_type=ValueType.STRING,
        default=DEFAULT_BRANCH_PATTERN,
        description="Git branch name pattern for task branches",
    ),
)

_RULES = (
    CrossFieldRule(
        key="retry.delay",
        message="must not exceed retry.maxDelay",
        check=lambda c: c["retry.delay"] <= c["retry.maxDelay"],
    ),
    CrossFieldRule(
        key="storage.apiEndpoint",
        message="storage.type is 'api' but no API endpoint is configured",
        check=lambda c: c["storage.type"] != STORAGE_TYPE_API or bool(c["storage.apiEndpoint"]),
        severity=IssueSeverity.WARNING,
    ),
    CrossFieldRule(
        key="models.fallback",
        message="fallback model is the same as the main model",
        check=lambda c: c["models.fallback"] != c["models.main"],
        severity=IssueSeverity.WARNING,
    ),
)

DEFAULT_SCHEMA = ConfigSchema(
    _KEYS,
    version=SCHEMA_VERSION,
    env_prefix=ENV_PREFIX,
    rules=_RULES,
)
