"""Enrichment modules - geolocation, device parsing and session analysis."""

from visitor_tracker.enrichment.geo import GeoResolver
from visitor_tracker.enrichment.device import DeviceParser
from visitor_tracker.enrichment.session import SessionAnalyzer

__all__ = [
    "GeoResolver",
    "DeviceParser",
    "SessionAnalyzer",
]
