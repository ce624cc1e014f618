"""Services for taskmaster-config."""

from taskmaster_config.services.config_loader import ConfigLoader, resolve_config_path
from taskmaster_config.services.config_manager import ConfigManager, get_config_manager
from taskmaster_config.services.config_merger import ConfigMerger
from taskmaster_config.services.config_persistence import ConfigPersistence
from taskmaster_config.services.environment_provider import EnvironmentConfigProvider
from taskmaster_config.services.runtime_state import RuntimeStateManager
from taskmaster_config.services.tag_state import TagStateStore

__all__ = [
    "ConfigLoader",
    "ConfigManager",
    "ConfigMerger",
    "ConfigPersistence",
    "EnvironmentConfigProvider",
    "RuntimeStateManager",
    "TagStateStore",
    "get_config_manager",
    "resolve_config_path",
]
