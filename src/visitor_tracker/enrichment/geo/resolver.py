"""Geo Resolver - best-effort geolocation for a client address.

Local and private addresses are tagged without any network call. Public
addresses go to the primary provider, then once to the fallback. When
both fail the caller gets an "unknown" GeoInfo with an error marker;
``resolve`` never raises.
"""

import ipaddress
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from visitor_tracker.common.constants import GeoConstants, HttpConstants
from visitor_tracker.common.exceptions import GeoProviderError
from visitor_tracker.data.schemas.geo import GeoInfo
from visitor_tracker.enrichment.geo.flags import country_flag
from visitor_tracker.enrichment.geo.providers import GeoProvider, IpApiProvider, IpapiCoProvider
from visitor_tracker.enrichment.geo.threat import PatternThreatIntelligence, ThreatIntelligence

logger = logging.getLogger(__name__)

UNKNOWN = GeoConstants.UNKNOWN

PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(network) for network in GeoConstants.PRIVATE_NETWORKS
)


def clean_address(address: Optional[str]) -> str:
    """Strip whitespace and the IPv4-mapped IPv6 prefix."""
    cleaned = (address or "").strip()
    if cleaned.lower().startswith(GeoConstants.IPV4_MAPPED_PREFIX):
        cleaned = cleaned[len(GeoConstants.IPV4_MAPPED_PREFIX):]
    return cleaned


def is_local_address(ip: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    """Loopback, link-local, unspecified and RFC 1918 / ULA private addresses.
    
    Documentation and other special-purpose blocks (203.0.113.0/24,
    2001:db8::/32) are not local and go to the providers.
    """
    if ip.is_loopback or ip.is_link_local or ip.is_unspecified:
        return True
    return any(ip in network for network in PRIVATE_NETWORKS)


def local_geo_info(address: str) -> GeoInfo:
    return GeoInfo(
        country=GeoConstants.LOCAL_COUNTRY,
        city=GeoConstants.LOCAL_CITY,
        isp=GeoConstants.LOCAL_ISP,
        query=address or UNKNOWN,
        is_local=True,
    )


def unknown_geo_info(address: str, error: str) -> GeoInfo:
    return GeoInfo(
        country=GeoConstants.UNKNOWN_COUNTRY,
        query=address or UNKNOWN,
        error=error,
    )


def _text(value: Any) -> str:
    if value is None or value == "":
        return UNKNOWN
    return str(value)


def _coordinate(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None and value != "" else None
    except (TypeError, ValueError):
        return None


def build_geo_info(
    attributes: Dict[str, Any], address: str, provider: str, is_backup: bool
) -> GeoInfo:
    """Build a GeoInfo from canonical provider attributes."""
    latitude = _coordinate(attributes.get("latitude"))
    longitude = _coordinate(attributes.get("longitude"))
    coordinates = (
        f"{latitude}, {longitude}"
        if latitude is not None and longitude is not None else UNKNOWN
    )
    country_code = attributes.get("country_code")
    
    return GeoInfo(
        continent=_text(attributes.get("continent")),
        country=f"{attributes.get('country') or UNKNOWN} {country_flag(country_code)}",
        country_code=_text(country_code),
        region=_text(attributes.get("region")),
        region_code=_text(attributes.get("region_code")),
        city=_text(attributes.get("city")),
        district=_text(attributes.get("district")),
        zip=_text(attributes.get("zip")),
        coordinates=coordinates,
        latitude=latitude,
        longitude=longitude,
        timezone=_text(attributes.get("timezone")),
        utc_offset=_text(attributes.get("utc_offset")),
        currency=_text(attributes.get("currency")),
        languages=_text(attributes.get("languages")),
        calling_code=_text(attributes.get("calling_code")),
        isp=_text(attributes.get("isp")),
        org=_text(attributes.get("org")),
        asn=_text(attributes.get("asn")),
        asn_org=_text(attributes.get("asn_org")),
        is_mobile=bool(attributes.get("is_mobile")),
        is_proxy=bool(attributes.get("is_proxy")),
        is_hosting=bool(attributes.get("is_hosting")),
        connection=_text(attributes.get("connection")),
        query=_text(attributes.get("query") or address),
        is_backup=is_backup,
        provider=provider,
    )


class GeoResolver:
    """Resolves client addresses through an ordered list of providers."""
    
    def __init__(
        self,
        providers: Optional[Sequence[GeoProvider]] = None,
        threat_intel: Optional[ThreatIntelligence] = None,
        timeout: float = HttpConstants.DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics=None,
    ):
        """Initialize the resolver.
        
        Args:
            providers: Providers in the order they are tried. Defaults to
                ip-api.com then ipapi.co.
            threat_intel: Threat-intelligence backend
            timeout: Per-call timeout in seconds
            transport: Custom httpx transport (tests inject a mock here)
            metrics: Optional MetricsCollector for lookup outcomes
        """
        self.providers: List[GeoProvider] = list(providers or (IpApiProvider(), IpapiCoProvider()))
        self.threat_intel = threat_intel or PatternThreatIntelligence()
        self.timeout = timeout
        self._transport = transport
        self._metrics = metrics
    
    async def resolve(self, address: Optional[str]) -> GeoInfo:
        """Resolve an address to a GeoInfo. Never raises."""
        cleaned = clean_address(address)
        try:
            return await self._resolve(cleaned)
        except Exception as e:
            logger.exception(
                "Geolocation error",
                extra={"address": cleaned, "error_type": type(e).__name__}
            )
            return unknown_geo_info(cleaned, str(e))
    
    async def _resolve(self, address: str) -> GeoInfo:
        if not address:
            return local_geo_info(address)
        
        try:
            ip = ipaddress.ip_address(address)
        except ValueError:
            logger.info(f"Skipping geolocation for unparseable address {address!r}")
            return unknown_geo_info(address, GeoConstants.INVALID_ADDRESS)
        
        if is_local_address(ip):
            return local_geo_info(address)
        
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for provider in self.providers:
                try:
                    attributes = await provider.lookup(client, address)
                except (GeoProviderError, httpx.HTTPError, ValueError) as e:
                    logger.warning(
                        f"Geolocation via {provider.name} failed: {type(e).__name__}: {e}"
                    )
                    self._record(provider.name, success=False)
                    continue
                
                self._record(provider.name, success=True)
                geo = build_geo_info(attributes, address, provider.name, provider.is_backup)
                geo.threat_info = self.threat_intel.assess(address)
                return geo
        
        return unknown_geo_info(address, GeoConstants.ALL_PROVIDERS_FAILED)
    
    def _record(self, provider: str, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_geo_lookup(provider, success)
