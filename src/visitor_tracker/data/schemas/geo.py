"""Geolocation schema - canonical definition."""

from typing import Literal, Optional
from pydantic import BaseModel, Field

from visitor_tracker.common.constants import GeoConstants

UNKNOWN = GeoConstants.UNKNOWN

ThreatLevel = Literal["Low", "Medium", "High", "Critical", "Unknown"]


class ThreatInfo(BaseModel):
    """Threat assessment attached to a resolved address.
    
    Produced by a pluggable threat-intelligence backend. The default
    backend is a pattern stub and carries no real reputation data.
    """
    is_vpn: bool = Field(default=False)
    is_tor: bool = Field(default=False)
    is_malicious: bool = Field(default=False)
    reputation: str = Field(default=UNKNOWN)
    threat_level: ThreatLevel = Field(default="Low")


class GeoInfo(BaseModel):
    """Normalized location and network attributes for a client address.
    
    Providers disagree on key names; every provider response is mapped
    onto this shape. Missing attributes carry the "Unknown" sentinel.
    """
    continent: str = Field(default=UNKNOWN)
    country: str = Field(default=UNKNOWN, description="Display name with flag")
    country_code: str = Field(default=UNKNOWN)
    region: str = Field(default=UNKNOWN)
    region_code: str = Field(default=UNKNOWN)
    city: str = Field(default=UNKNOWN)
    district: str = Field(default=UNKNOWN)
    zip: str = Field(default=UNKNOWN)
    coordinates: str = Field(default=UNKNOWN, description="'lat, lon' or Unknown")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    timezone: str = Field(default=UNKNOWN)
    utc_offset: str = Field(default=UNKNOWN)
    currency: str = Field(default=UNKNOWN)
    languages: str = Field(default=UNKNOWN)
    calling_code: str = Field(default=UNKNOWN)
    isp: str = Field(default=UNKNOWN)
    org: str = Field(default=UNKNOWN)
    asn: str = Field(default=UNKNOWN)
    asn_org: str = Field(default=UNKNOWN)
    is_mobile: bool = Field(default=False)
    is_proxy: bool = Field(default=False)
    is_hosting: bool = Field(default=False)
    connection: str = Field(default=UNKNOWN)
    query: str = Field(default=UNKNOWN, description="Address the lookup was made for")
    is_backup: bool = Field(default=False, description="Resolved by the fallback provider")
    is_local: bool = Field(default=False, description="Local/private address, no lookup made")
    provider: Optional[str] = Field(default=None)
    error: Optional[str] = Field(default=None)
    threat_info: ThreatInfo = Field(
        default_factory=lambda: ThreatInfo(threat_level="Unknown")
    )
    
    @property
    def has_coordinates(self) -> bool:
        return self.coordinates != UNKNOWN
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "continent": "North America",
                "country": "United States 🇺🇸",
                "country_code": "US",
                "region": "Virginia",
                "city": "Ashburn",
                "coordinates": "39.03, -77.5",
                "isp": "Example ISP",
                "asn": "AS64500 Example",
                "provider": "ip-api.com",
            }
        }
    }
