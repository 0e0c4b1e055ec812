"""Common utilities - logging, config, exceptions."""

from visitor_tracker.common.logging import configure_logging, get_logger
from visitor_tracker.common.config import (
    Config,
    NotificationSettings,
    get_config,
    reset_config,
)
from visitor_tracker.common.exceptions import (
    TrackerException,
    ConfigurationError,
    GeoProviderError,
    NotificationError,
    VisitStoreError,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Config
    "Config",
    "NotificationSettings",
    "get_config",
    "reset_config",
    # Exceptions
    "TrackerException",
    "ConfigurationError",
    "GeoProviderError",
    "NotificationError",
    "VisitStoreError",
]
