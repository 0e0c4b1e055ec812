"""Data schemas - canonical Pydantic definitions."""

from visitor_tracker.data.schemas.geo import GeoInfo, ThreatInfo
from visitor_tracker.data.schemas.device import DeviceInfo
from visitor_tracker.data.schemas.session import SessionInfo
from visitor_tracker.data.schemas.visit import VisitClassification
from visitor_tracker.data.schemas.visitor import EnrichedVisit, VisitorData

__all__ = [
    "GeoInfo",
    "ThreatInfo",
    "DeviceInfo",
    "SessionInfo",
    "VisitClassification",
    "VisitorData",
    "EnrichedVisit",
]
