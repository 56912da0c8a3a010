"""Configuration management for adolinks.

This package contains:
- settings: Settings dataclass and override key naming
- manager: ConfigManager for loading/saving configuration
- store: Read-only ConfigurationStore used at runtime
"""

from adolinks.config.manager import ConfigManager
from adolinks.config.settings import CONFIG_FILE, Settings, normalize_tenant_id
from adolinks.config.store import ConfigurationStore

__all__ = [
    "CONFIG_FILE",
    "ConfigManager",
    "ConfigurationStore",
    "Settings",
    "normalize_tenant_id",
]
