"""Configuration module."""

from visitor_tracker.common.config.settings import (
    Config,
    Environment,
    LogLevel,
    NotificationSettings,
    VisitStoreType,
    get_config,
    reset_config,
)

__all__ = [
    "Config",
    "Environment",
    "LogLevel",
    "NotificationSettings",
    "VisitStoreType",
    "get_config",
    "reset_config",
]
