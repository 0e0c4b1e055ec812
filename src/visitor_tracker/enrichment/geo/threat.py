"""Threat intelligence interface.

The bundled backend is a placeholder: it matches suspicious substrings
in the raw address string, which real dotted-decimal or IPv6 addresses
never contain. Deployments that need reputation data plug in their own
``ThreatIntelligence`` implementation.
"""

from typing import Protocol, Tuple

from visitor_tracker.data.schemas.geo import ThreatInfo


class ThreatIntelligence(Protocol):
    """Assesses a client address."""
    
    def assess(self, address: str) -> ThreatInfo:
        ...


class PatternThreatIntelligence:
    """Substring-matching stub backend."""
    
    SUSPICIOUS_PATTERNS: Tuple[str, ...] = ("proxy", "vpn")
    
    def assess(self, address: str) -> ThreatInfo:
        lowered = address.lower()
        if any(pattern in lowered for pattern in self.SUSPICIOUS_PATTERNS):
            return ThreatInfo(is_vpn=True, threat_level="Medium")
        return ThreatInfo()
