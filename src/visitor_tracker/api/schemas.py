"""API Schemas - response models for the tracking endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class TrackingSummary(CamelModel):
    is_unique: bool = Field(..., description="New visit within the dedup window")
    visit_count: int = Field(..., ge=1)
    session_type: str = Field(...)


class LocationSummary(CamelModel):
    country: str = Field(...)
    city: str = Field(...)
    coordinates: str = Field(...)


class DeviceSummary(CamelModel):
    type: str = Field(..., description="Device description")
    browser: str = Field(...)
    os: str = Field(...)


class SecuritySummary(CamelModel):
    threat_level: str = Field(...)
    trust_level: str = Field(...)
    fingerprint: str = Field(...)


class LogData(CamelModel):
    request_id: str = Field(...)
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")
    tracking: TrackingSummary
    location: LocationSummary
    device: DeviceSummary
    security: SecuritySummary


class LogResponse(CamelModel):
    """Response body for GET/POST /api/log."""
    success: bool = Field(default=True)
    message: str = Field(
        default="Visitor tracked successfully with enhanced data collection"
    )
    data: LogData
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Visitor tracked successfully with enhanced data collection",
                "data": {
                    "requestId": "VT-1760000000000-1f2e3d4c5b6a7988",
                    "timestamp": "2026-10-17T12:00:00.000Z",
                    "tracking": {"isUnique": True, "visitCount": 1, "sessionType": "New Session"},
                    "location": {"country": "United States 🇺🇸", "city": "Ashburn",
                                 "coordinates": "39.03, -77.5"},
                    "device": {"type": "Desktop/Laptop", "browser": "Chrome 120.0.0",
                               "os": "Windows 10"},
                    "security": {"threatLevel": "Low", "trustLevel": "High",
                                 "fingerprint": "3f2a9c1b7d4e8f60"},
                },
            }
        },
    )


class ErrorResponse(CamelModel):
    """Generic error envelope. Never carries internal details."""
    success: bool = Field(default=False)
    error: str = Field(default="Internal server error")
    message: Optional[str] = Field(default=None)
    timestamp: str = Field(...)
    request_id: str = Field(...)


class AnalyticsSummary(CamelModel):
    """Response body for GET /api/analytics."""
    total_visitors: int = Field(..., ge=0, description="Identities currently tracked")
    unique_visitors: int = Field(..., ge=0)
    returning_visitors: int = Field(..., ge=0, description="Identities with more than one visit")
    total_visits: int = Field(..., ge=0)
    return_rate: int = Field(..., ge=0, description="Returning share of visitors, percent")
    top_countries: Dict[str, int] = Field(default_factory=dict)
    top_browsers: Dict[str, int] = Field(default_factory=dict)
    top_os: Dict[str, int] = Field(default_factory=dict)
    device_types: Dict[str, int] = Field(default_factory=dict)
    threat_levels: Dict[str, int] = Field(default_factory=dict)
    last_updated: str = Field(...)
