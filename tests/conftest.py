"""Shared test fixtures for the visitor tracker."""

import pytest

from visitor_tracker.common.config import reset_config
from visitor_tracker.data.schemas import (
    DeviceInfo,
    EnrichedVisit,
    GeoInfo,
    SessionInfo,
    ThreatInfo,
    VisitorData,
)

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

SINK_ENV_VARS = (
    "TELEGRAM_ENABLED", "TELEGRAM_TOKEN", "TELEGRAM_CHAT_ID",
    "DISCORD_ENABLED", "DISCORD_WEBHOOK",
    "EMAIL_ENABLED", "EMAIL_SERVICE_URL", "EMAIL_API_KEY", "EMAIL_TO",
    "DATABASE_ENABLED", "DATABASE_URL", "DATABASE_API_KEY",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Start every test without sink flags and with a fresh config."""
    for name in SINK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_visit():
    """Factory for EnrichedVisit records with overridable parts."""
    def _make(
        is_unique: bool = True,
        visit_count: int = 1,
        geo: GeoInfo = None,
        device: DeviceInfo = None,
        user_agent: str = CHROME_UA,
    ) -> EnrichedVisit:
        visitor = VisitorData(
            ip="8.8.8.8",
            user_agent=user_agent,
            referrer="https://example.com/",
            accept_language="en-US,en;q=0.9",
            accept_encoding="gzip, deflate, br",
            accept_types="text/html",
            method="GET",
            protocol="https",
            time="October 17, 2026, 03:00:00 PM EEST",
            timestamp="2026-10-17T12:00:00.000Z",
            request_id="VT-1760702400000-0123456789abcdef",
            is_unique=is_unique,
            visit_count=visit_count,
            languages="en-US, en",
        )
        geo = geo or GeoInfo(
            country="United States 🇺🇸",
            country_code="US",
            region="California",
            city="Mountain View",
            coordinates="37.4, -122.1",
            latitude=37.4,
            longitude=-122.1,
            isp="Google LLC",
            provider="ip-api.com",
            threat_info=ThreatInfo(),
        )
        device = device or DeviceInfo(
            browser="Chrome 120.0.0",
            os="Windows 10",
            engine="Blink",
            cpu="amd64",
            platform="Windows",
        )
        session = SessionInfo(
            fingerprint="0123456789abcdef",
            visitor_hash="abcdef012345",
            session_type="New Session" if is_unique else "Returning Session",
            session_id="abcdef012345-1760702400000",
            trust_score=85,
            trust_level="High",
        )
        return EnrichedVisit(visitor=visitor, geo=geo, device=device, session=session)
    
    return _make
