"""Configuration management - Centralized configuration for the tracker.

Application settings are loaded once from environment variables prefixed
with TRACKER_. Notification sink settings keep the unprefixed names of the
deployment they came from and are re-read on every request.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from visitor_tracker.common.constants import HttpConstants, TrackingConstants
from visitor_tracker.common.exceptions import ConfigurationError


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class VisitStoreType(str, Enum):
    """Visit store backend types."""
    MEMORY = "memory"
    DYNAMODB = "dynamodb"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Config:
    """Central configuration object for the tracker.
    
    All settings can be overridden via environment variables prefixed
    with TRACKER_.
    
    Example:
        TRACKER_ENVIRONMENT=production
        TRACKER_DEDUP_WINDOW_SECONDS=900
        TRACKER_VISIT_STORE=dynamodb
    """
    
    # Core settings
    environment: Environment = field(
        default_factory=lambda: Environment(
            os.getenv("TRACKER_ENVIRONMENT", "development")
        )
    )
    debug: bool = field(default_factory=lambda: _env_flag("TRACKER_DEBUG"))
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("TRACKER_LOG_LEVEL", "INFO"))
    )
    
    # API settings
    api_host: str = field(
        default_factory=lambda: os.getenv("TRACKER_API_HOST", "0.0.0.0")
    )
    api_port: int = field(
        default_factory=lambda: int(os.getenv("TRACKER_API_PORT", "8000"))
    )
    enable_docs: Optional[bool] = field(
        default_factory=lambda: (
            _env_flag("TRACKER_ENABLE_DOCS")
            if os.getenv("TRACKER_ENABLE_DOCS") is not None else None
        )
    )
    
    # Deduplication
    dedup_window_seconds: int = field(
        default_factory=lambda: int(os.getenv(
            "TRACKER_DEDUP_WINDOW_SECONDS", str(TrackingConstants.DEFAULT_WINDOW_SECONDS)
        ))
    )
    visit_store: VisitStoreType = field(
        default_factory=lambda: VisitStoreType(
            os.getenv("TRACKER_VISIT_STORE", "memory")
        )
    )
    visit_store_max_entries: int = field(
        default_factory=lambda: int(os.getenv(
            "TRACKER_VISIT_STORE_MAX_ENTRIES", str(TrackingConstants.DEFAULT_MAX_ENTRIES)
        ))
    )
    visit_retention_seconds: int = field(
        default_factory=lambda: int(os.getenv(
            "TRACKER_VISIT_RETENTION_SECONDS", str(TrackingConstants.DEFAULT_RETENTION_SECONDS)
        ))
    )
    dynamodb_table: Optional[str] = field(
        default_factory=lambda: os.getenv("TRACKER_DYNAMODB_TABLE")
    )
    
    # Outbound HTTP
    http_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv(
            "TRACKER_HTTP_TIMEOUT_SECONDS", str(HttpConstants.DEFAULT_TIMEOUT_SECONDS)
        ))
    )
    
    # Presentation
    display_timezone: str = field(
        default_factory=lambda: os.getenv("TRACKER_DISPLAY_TIMEZONE", "Africa/Cairo")
    )
    
    # Monitoring
    metrics_enabled: bool = field(
        default_factory=lambda: _env_flag("TRACKER_METRICS_ENABLED")
    )
    
    # AWS settings (for DynamoDB/CloudWatch)
    aws_region: str = field(
        default_factory=lambda: os.getenv("AWS_DEFAULT_REGION", "us-east-1")
    )
    
    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.dedup_window_seconds <= 0:
            raise ConfigurationError(
                "TRACKER_DEDUP_WINDOW_SECONDS must be positive",
                details={"value": self.dedup_window_seconds},
            )
        
        if self.visit_store_max_entries <= 0:
            raise ConfigurationError(
                "TRACKER_VISIT_STORE_MAX_ENTRIES must be positive",
                details={"value": self.visit_store_max_entries},
            )
        
        if self.visit_retention_seconds < self.dedup_window_seconds:
            raise ConfigurationError(
                "TRACKER_VISIT_RETENTION_SECONDS must not be shorter than the dedup window",
                details={
                    "retention": self.visit_retention_seconds,
                    "window": self.dedup_window_seconds,
                },
            )
        
        if self.http_timeout_seconds <= 0:
            raise ConfigurationError(
                "TRACKER_HTTP_TIMEOUT_SECONDS must be positive",
                details={"value": self.http_timeout_seconds},
            )
        
        if self.visit_store == VisitStoreType.DYNAMODB and not self.dynamodb_table:
            raise ConfigurationError(
                "TRACKER_DYNAMODB_TABLE must be set when using the DynamoDB visit store"
            )
        
        try:
            ZoneInfo(self.display_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown TRACKER_DISPLAY_TIMEZONE: {self.display_timezone}",
                details={"value": self.display_timezone},
            ) from e
        
        # Warn about debug in production
        if self.environment == Environment.PRODUCTION and self.debug:
            import warnings
            warnings.warn(
                "Debug mode is enabled in production environment",
                RuntimeWarning,
                stacklevel=2
            )
    
    @property
    def dedup_window(self) -> timedelta:
        """Dedup window as a timedelta."""
        return timedelta(seconds=self.dedup_window_seconds)
    
    @property
    def visit_retention(self) -> timedelta:
        """Idle time after which a visit record expires."""
        return timedelta(seconds=self.visit_retention_seconds)
    
    @property
    def docs_enabled(self) -> bool:
        """Interactive docs default to off in production."""
        if self.enable_docs is not None:
            return self.enable_docs
        return not self.is_production
    
    @property
    def display_zone(self) -> ZoneInfo:
        return ZoneInfo(self.display_timezone)
    
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION
    
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


@dataclass
class NotificationSettings:
    """Enable flags and credentials for each notification sink.
    
    Built per request with ``NotificationSettings.from_env()`` so that
    sinks can be toggled without restarting the process.
    """
    
    telegram_enabled: bool = False
    telegram_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    
    discord_enabled: bool = False
    discord_webhook: Optional[str] = None
    
    email_enabled: bool = False
    email_service_url: Optional[str] = None
    email_api_key: Optional[str] = None
    email_to: Optional[str] = None
    
    database_enabled: bool = False
    database_url: Optional[str] = None
    database_api_key: Optional[str] = None
    
    @classmethod
    def from_env(cls) -> "NotificationSettings":
        """Read sink settings from the process environment."""
        return cls(
            telegram_enabled=_env_flag("TELEGRAM_ENABLED"),
            telegram_token=os.getenv("TELEGRAM_TOKEN"),
            telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID"),
            discord_enabled=_env_flag("DISCORD_ENABLED"),
            discord_webhook=os.getenv("DISCORD_WEBHOOK"),
            email_enabled=_env_flag("EMAIL_ENABLED"),
            email_service_url=os.getenv("EMAIL_SERVICE_URL"),
            email_api_key=os.getenv("EMAIL_API_KEY"),
            email_to=os.getenv("EMAIL_TO"),
            database_enabled=_env_flag("DATABASE_ENABLED"),
            database_url=os.getenv("DATABASE_URL"),
            database_api_key=os.getenv("DATABASE_API_KEY"),
        )


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.
    
    Returns:
        Config: The global configuration singleton.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
