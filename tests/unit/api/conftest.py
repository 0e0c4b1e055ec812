"""Fixtures for service and gateway tests."""

import httpx
import pytest

from visitor_tracker.api.service import VisitorTrackingService
from visitor_tracker.common.config import Config
from visitor_tracker.enrichment.geo import GeoResolver
from visitor_tracker.notifications import NotificationDispatcher

IP_API_BODY = {
    "status": "success",
    "country": "United States",
    "countryCode": "US",
    "regionName": "California",
    "region": "CA",
    "city": "Mountain View",
    "lat": 37.4,
    "lon": -122.1,
    "isp": "Google LLC",
    "query": "8.8.8.8",
}


class FakeUpstream:
    """Answers geolocation and sink calls; individual hosts can be made to fail."""
    
    def __init__(self):
        self.failing_hosts = set()
        self.requests = []
    
    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host in self.failing_hosts:
            raise httpx.ConnectTimeout("timed out")
        if host == "ip-api.com":
            return httpx.Response(200, json=IP_API_BODY)
        if host == "discord.test":
            return httpx.Response(500, json={"message": "webhook down"})
        return httpx.Response(200, json={"ok": True})
    
    def hosts(self):
        return [r.url.host for r in self.requests]


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def service(upstream):
    transport = httpx.MockTransport(upstream)
    return VisitorTrackingService(
        config=Config(),
        geo_resolver=GeoResolver(transport=transport),
        dispatcher=NotificationDispatcher(transport=transport),
    )
