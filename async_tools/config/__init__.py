"""Module de configuration."""

from async_tools.config.loader import (
    ConfigLoader,
    FileConfigLoader,
)
from async_tools.config.settings import (
    AsyncToolsSettings,
    CacheSettings,
    ExecutionSettings,
    LoggingSettings,
    load_settings,
)

__all__ = [
    "ConfigLoader",
    "FileConfigLoader",
    "AsyncToolsSettings",
    "CacheSettings",
    "ExecutionSettings",
    "LoggingSettings",
    "load_settings",
]
