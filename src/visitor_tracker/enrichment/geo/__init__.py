"""Geo Resolver - module init."""

from visitor_tracker.enrichment.geo.resolver import GeoResolver
from visitor_tracker.enrichment.geo.providers import GeoProvider, IpApiProvider, IpapiCoProvider
from visitor_tracker.enrichment.geo.threat import PatternThreatIntelligence, ThreatIntelligence
from visitor_tracker.enrichment.geo.flags import country_flag

__all__ = [
    "GeoResolver",
    "GeoProvider",
    "IpApiProvider",
    "IpapiCoProvider",
    "PatternThreatIntelligence",
    "ThreatIntelligence",
    "country_flag",
]
