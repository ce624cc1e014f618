"""Runtime settings for the configuration engine itself.

These settings control how the engine behaves (backups, log verbosity),
not the Task Master configuration it serves. They use Pydantic Settings
so they can be overridden via environment variables with the
TASKMASTER_CONFIG_ prefix, and injected directly in tests.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Configuration engine settings.

    Can be overridden via environment variables with TASKMASTER_CONFIG_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="TASKMASTER_CONFIG_")

    backup_on_save: bool = Field(
        default=False,
        description="Back up the project config file before every write",
    )
    max_backups: int = Field(
        default=5,
        ge=0,
        description="Number of config backups to keep",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level used by the tmc command line",
    )


# Singleton instance for easy import
engine_settings = EngineSettings()
