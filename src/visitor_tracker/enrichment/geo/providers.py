"""Geolocation providers.

Each provider performs one lookup and maps its own field names onto the
canonical GeoInfo keys. Failures raise GeoProviderError (or the httpx
error that caused them); the resolver decides what to try next.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx

from visitor_tracker.common.constants import GeoConstants
from visitor_tracker.common.exceptions import GeoProviderError


class GeoProvider(ABC):
    """Abstract base class for geolocation providers."""
    
    name: str = "provider"
    is_backup: bool = False
    
    @abstractmethod
    async def lookup(self, client: httpx.AsyncClient, address: str) -> Dict[str, Any]:
        """Look up an address.
        
        Args:
            client: Shared HTTP client carrying the per-call timeout
            address: Cleaned public address
            
        Returns:
            Attributes keyed by canonical GeoInfo field names
            
        Raises:
            GeoProviderError: If the provider answered without a result
            httpx.HTTPError: On transport failures and timeouts
        """
        pass
    
    def _check_status(self, response: httpx.Response) -> None:
        if response.status_code != 200:
            raise GeoProviderError(
                f"{self.name} returned HTTP {response.status_code}",
                provider=self.name,
                details={"status_code": response.status_code},
            )


class IpApiProvider(GeoProvider):
    """ip-api.com JSON endpoint (primary)."""
    
    name = GeoConstants.PRIMARY_PROVIDER
    
    async def lookup(self, client: httpx.AsyncClient, address: str) -> Dict[str, Any]:
        response = await client.get(
            GeoConstants.PRIMARY_URL.format(ip=address),
            params={"fields": GeoConstants.PRIMARY_FIELDS},
        )
        self._check_status(response)
        data = response.json()
        if data.get("status") != "success":
            raise GeoProviderError(
                data.get("message") or f"{self.name} lookup failed",
                provider=self.name,
            )
        
        return {
            "continent": data.get("continent"),
            "country": data.get("country"),
            "country_code": data.get("countryCode"),
            "region": data.get("regionName"),
            "region_code": data.get("region"),
            "city": data.get("city"),
            "district": data.get("district"),
            "zip": data.get("zip"),
            "latitude": data.get("lat"),
            "longitude": data.get("lon"),
            "timezone": data.get("timezone"),
            "utc_offset": data.get("offset"),
            "currency": data.get("currency"),
            "isp": data.get("isp"),
            "org": data.get("org"),
            "asn": data.get("as"),
            "asn_org": data.get("asname"),
            "is_mobile": data.get("mobile"),
            "is_proxy": data.get("proxy"),
            "is_hosting": data.get("hosting"),
            "query": data.get("query"),
        }


class IpapiCoProvider(GeoProvider):
    """ipapi.co JSON endpoint (fallback)."""
    
    name = GeoConstants.BACKUP_PROVIDER
    is_backup = True
    
    async def lookup(self, client: httpx.AsyncClient, address: str) -> Dict[str, Any]:
        response = await client.get(GeoConstants.BACKUP_URL.format(ip=address))
        self._check_status(response)
        data = response.json()
        # Rate limits and reserved ranges come back as 200 with an error flag.
        if data.get("error"):
            raise GeoProviderError(
                data.get("reason") or f"{self.name} lookup failed",
                provider=self.name,
            )
        
        return {
            "continent": data.get("continent_code"),
            "country": data.get("country_name"),
            "country_code": data.get("country_code") or data.get("country"),
            "region": data.get("region"),
            "region_code": data.get("region_code"),
            "city": data.get("city"),
            "zip": data.get("postal"),
            "latitude": data.get("latitude"),
            "longitude": data.get("longitude"),
            "timezone": data.get("timezone"),
            "utc_offset": data.get("utc_offset"),
            "currency": data.get("currency"),
            "languages": data.get("languages"),
            "calling_code": data.get("country_calling_code"),
            "isp": data.get("org"),
            "org": data.get("org"),
            "asn": data.get("asn"),
            "connection": data.get("connection_type"),
            "query": data.get("ip"),
        }
