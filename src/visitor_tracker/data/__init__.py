"""Data layer - canonical schemas."""

from visitor_tracker.data.schemas import (
    DeviceInfo,
    EnrichedVisit,
    GeoInfo,
    SessionInfo,
    ThreatInfo,
    VisitClassification,
    VisitorData,
)

__all__ = [
    "DeviceInfo",
    "EnrichedVisit",
    "GeoInfo",
    "SessionInfo",
    "ThreatInfo",
    "VisitClassification",
    "VisitorData",
]
