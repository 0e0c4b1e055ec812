"""Visitor schemas - request metadata and the enriched record sent to sinks."""

from typing import Optional
from pydantic import BaseModel, Field

from visitor_tracker.data.schemas.device import DeviceInfo
from visitor_tracker.data.schemas.geo import GeoInfo
from visitor_tracker.data.schemas.session import SessionInfo


class VisitorData(BaseModel):
    """Visitor metadata extracted from a single request."""
    ip: str = Field(..., description="Client address")
    user_agent: str = Field(...)
    referrer: str = Field(...)
    accept_language: str = Field(...)
    accept_encoding: str = Field(...)
    accept_types: str = Field(...)
    cache_control: Optional[str] = Field(default=None)
    connection: Optional[str] = Field(default=None)
    method: str = Field(...)
    protocol: str = Field(default="http")
    time: str = Field(..., description="Localized display time")
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")
    request_id: str = Field(...)
    is_unique: bool = Field(...)
    visit_count: int = Field(..., ge=1)
    languages: str = Field(..., description="Language tags without quality values")


class EnrichedVisit(BaseModel):
    """Everything known about one visit; the record handed to every sink."""
    visitor: VisitorData
    geo: GeoInfo
    device: DeviceInfo
    session: SessionInfo
