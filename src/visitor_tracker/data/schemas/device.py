"""Device schema - canonical definition."""

from pydantic import BaseModel, Field

from visitor_tracker.common.constants import GeoConstants

UNKNOWN = GeoConstants.UNKNOWN


class DeviceInfo(BaseModel):
    """Normalized OS/browser/device/engine descriptors for a user agent."""
    browser: str = Field(default=UNKNOWN, description="Browser name and version")
    os: str = Field(default=UNKNOWN, description="Operating system name and version")
    device: str = Field(default="Desktop/Laptop", description="Vendor, model and type")
    engine: str = Field(default=UNKNOWN, description="Rendering engine")
    cpu: str = Field(default=UNKNOWN, description="CPU architecture")
    languages: str = Field(default=UNKNOWN, description="Raw accept-language value")
    platform: str = Field(default=UNKNOWN, description="Operating system family")
    device_memory: str = Field(default=UNKNOWN, description="Device-Memory client hint")
    mobile_hint: str = Field(default=UNKNOWN, description="Sec-CH-UA-Mobile client hint")
    is_bot: bool = Field(default=False)
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "browser": "Chrome 120.0.0",
                "os": "Windows 10",
                "device": "Desktop/Laptop",
                "engine": "Blink",
                "cpu": "amd64",
                "languages": "en-US,en;q=0.9",
                "platform": "Windows",
            }
        }
    }
