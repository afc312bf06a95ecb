from __future__ import annotations

from .settings import (
    AppConfig,
    AppSection,
    ConfigurationMissingError,
    ContextConfig,
    CronConfig,
    LoggingConfig,
    ServerConfig,
    Settings,
    load_config,
)

__all__ = [
    "AppConfig",
    "AppSection",
    "ConfigurationMissingError",
    "ContextConfig",
    "CronConfig",
    "LoggingConfig",
    "ServerConfig",
    "Settings",
    "load_config",
]
