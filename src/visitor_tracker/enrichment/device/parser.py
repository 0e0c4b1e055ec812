"""Device Parser - normalized OS/browser/device/engine descriptors.

Token parsing is delegated to the ``user-agents`` library; engine and
CPU architecture, which it does not report, are read from well-known
user-agent tokens.
"""

import logging
import re
from typing import Mapping, Optional, Tuple

from user_agents import parse as parse_user_agent

from visitor_tracker.common.constants import GeoConstants
from visitor_tracker.data.schemas.device import DeviceInfo

logger = logging.getLogger(__name__)

UNKNOWN = GeoConstants.UNKNOWN

# Order matters: Blink user agents also carry AppleWebKit and Gecko tokens.
ENGINE_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("Trident", re.compile(r"Trident/([\d.]+)")),
    ("Presto", re.compile(r"Presto/([\d.]+)")),
    ("EdgeHTML", re.compile(r"Edge/([\d.]+)")),
    ("Blink", re.compile(r"Chrom(?:e|ium)/([\d.]+)")),
    ("WebKit", re.compile(r"AppleWebKit/([\d.]+)")),
    ("Gecko", re.compile(r"rv:([\d.]+)\) Gecko/")),
)

CPU_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("amd64", re.compile(r"x86_64|x86-64|x64;|win64|wow64|amd64", re.IGNORECASE)),
    ("arm64", re.compile(r"aarch64|arm64", re.IGNORECASE)),
    ("arm", re.compile(r"armv\d|\barm\b", re.IGNORECASE)),
    ("ia32", re.compile(r"i[3-6]86|\bx86\b", re.IGNORECASE)),
)


def _known(value: Optional[str]) -> str:
    if not value or value == "Other":
        return ""
    return value


def _name_version(name: Optional[str], version: Optional[str]) -> str:
    return f"{_known(name) or UNKNOWN} {version or ''}".strip()


def detect_engine(user_agent: str) -> str:
    for name, pattern in ENGINE_PATTERNS:
        match = pattern.search(user_agent)
        if match:
            return f"{name} {match.group(1)}"
    return UNKNOWN


def detect_cpu(user_agent: str) -> str:
    for architecture, pattern in CPU_PATTERNS:
        if pattern.search(user_agent):
            return architecture
    return UNKNOWN


class DeviceParser:
    """Parses a user agent and client hints into a DeviceInfo."""
    
    def parse(
        self,
        user_agent: Optional[str],
        accept_language: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DeviceInfo:
        """Parse device information. Never raises.
        
        Args:
            user_agent: Raw User-Agent header
            accept_language: Raw Accept-Language header
            headers: Remaining request headers (lower-case keys) for
                client hints
            
        Returns:
            DeviceInfo with "Unknown" for anything not recognized
        """
        headers = headers or {}
        hints = {
            "languages": accept_language or UNKNOWN,
            "device_memory": headers.get("device-memory") or UNKNOWN,
            "mobile_hint": headers.get("sec-ch-ua-mobile") or UNKNOWN,
        }
        
        if not user_agent:
            return DeviceInfo(**hints)
        
        try:
            parsed = parse_user_agent(user_agent)
        except Exception as e:
            logger.warning(f"User agent parsing failed: {type(e).__name__}: {e}")
            return DeviceInfo(**hints)
        
        return DeviceInfo(
            browser=_name_version(parsed.browser.family, parsed.browser.version_string),
            os=_name_version(parsed.os.family, parsed.os.version_string),
            device=self._describe_device(parsed),
            engine=detect_engine(user_agent),
            cpu=detect_cpu(user_agent),
            platform=_known(parsed.os.family) or UNKNOWN,
            is_bot=bool(parsed.is_bot),
            **hints,
        )
    
    @staticmethod
    def _describe_device(parsed) -> str:
        if parsed.is_bot:
            return "Bot/Crawler"
        if parsed.is_tablet:
            device_type = "tablet"
        elif parsed.is_mobile:
            device_type = "mobile"
        else:
            return "Desktop/Laptop"
        
        vendor_model = f"{_known(parsed.device.brand)} {_known(parsed.device.model)}".strip()
        return f"{vendor_model} ({device_type})".strip()
