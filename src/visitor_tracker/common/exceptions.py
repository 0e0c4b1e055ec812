"""Custom exceptions for the visitor tracker.

All tracker exceptions inherit from TrackerException. Provider and sink
errors are raised inside their components and recovered before they reach
the request handler.
"""

from typing import Any, Dict, Optional


class TrackerException(Exception):
    """Base exception for all tracker errors.
    
    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """
    
    def __init__(
        self,
        message: str,
        code: str = "TRACKER_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logs and API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(TrackerException):
    """Raised when configuration is invalid or missing."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class GeoProviderError(TrackerException):
    """Raised when a geolocation provider call fails."""
    
    def __init__(
        self,
        message: str,
        provider: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["provider"] = provider
        self.provider = provider
        super().__init__(message, code="GEO_PROVIDER_ERROR", details=details)


class NotificationError(TrackerException):
    """Raised when a notification sink rejects or fails a dispatch."""
    
    def __init__(
        self,
        message: str,
        sink: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["sink"] = sink
        if status_code is not None:
            details["status_code"] = status_code
        self.sink = sink
        self.status_code = status_code
        super().__init__(message, code="NOTIFICATION_ERROR", details=details)


class VisitStoreError(TrackerException):
    """Raised when the visit store cannot read or write a record."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VISIT_STORE_ERROR", details=details)
