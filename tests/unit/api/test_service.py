"""Tests for the tracking service flow."""

import asyncio
from datetime import datetime, timedelta, timezone

from visitor_tracker.api.service import VisitorTrackingService, create_visit_store
from visitor_tracker.common.config import Config
from visitor_tracker.tracking import InMemoryVisitStore

T0 = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
UA = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"


def _track(service, headers, now=T0, method="GET", peer=None):
    return asyncio.run(service.track(headers, method, peer=peer, now=now))


class TestVisitorTrackingService:
    """End-to-end flow through the service with mocked upstreams."""
    
    def test_unique_visit_enriched(self, service, upstream):
        result = _track(service, {"x-forwarded-for": "8.8.8.8", "user-agent": UA})
        visit = result.visit
        
        assert visit.visitor.ip == "8.8.8.8"
        assert visit.visitor.is_unique is True
        assert visit.visitor.visit_count == 1
        assert visit.geo.country == "United States 🇺🇸"
        assert visit.device.browser.startswith("Firefox")
        assert visit.session.session_type == "New Session"
        assert result.outcomes == []
        assert upstream.hosts() == ["ip-api.com"]
    
    def test_repeat_within_window(self, service):
        headers = {"x-forwarded-for": "203.0.113.5", "user-agent": UA}
        _track(service, headers, now=T0)
        
        result = _track(service, headers, now=T0 + timedelta(minutes=10))
        
        assert result.visit.visitor.is_unique is False
        assert result.visit.visitor.visit_count == 1
        assert result.visit.session.session_type == "Returning Session"
    
    def test_repeat_after_window(self, service):
        headers = {"x-forwarded-for": "203.0.113.5", "user-agent": UA}
        _track(service, headers, now=T0)
        
        result = _track(service, headers, now=T0 + timedelta(minutes=31))
        
        assert result.visit.visitor.is_unique is True
        assert result.visit.visitor.visit_count == 2
    
    def test_geo_failure_degrades_to_unknown(self, service, upstream):
        upstream.failing_hosts.update({"ip-api.com", "ipapi.co"})
        
        result = _track(service, {"x-forwarded-for": "203.0.113.5", "user-agent": UA})
        
        assert result.visit.geo.error == "All geolocation services failed"
        assert result.visit.geo.country == "🌍 Unknown Location"
        assert upstream.hosts() == ["ip-api.com", "ipapi.co"]
        assert result.visit.visitor.is_unique is True
    
    def test_sink_failure_reported_not_raised(self, service, monkeypatch):
        monkeypatch.setenv("DISCORD_ENABLED", "true")
        monkeypatch.setenv("DISCORD_WEBHOOK", "https://discord.test/hook")
        monkeypatch.setenv("DATABASE_ENABLED", "true")
        monkeypatch.setenv("DATABASE_URL", "https://store.test")
        
        result = _track(service, {"x-forwarded-for": "8.8.8.8", "user-agent": UA})
        
        outcomes = {o.sink: o for o in result.outcomes}
        assert outcomes["discord"].success is False
        assert outcomes["discord"].status_code == 500
        assert outcomes["datastore"].success is True
    
    def test_sink_flags_read_per_request(self, service, monkeypatch):
        first = _track(service, {"x-forwarded-for": "8.8.8.8", "user-agent": UA})
        monkeypatch.setenv("DATABASE_ENABLED", "true")
        monkeypatch.setenv("DATABASE_URL", "https://store.test")
        
        second = _track(service, {"x-forwarded-for": "8.8.4.4", "user-agent": UA})
        
        assert first.outcomes == []
        assert [o.sink for o in second.outcomes] == ["datastore"]
    
    def test_peer_used_without_proxy_headers(self, service):
        result = _track(service, {"user-agent": UA}, peer="192.168.1.20")
        
        assert result.visit.visitor.ip == "192.168.1.20"
        assert result.visit.geo.is_local is True
    
    def test_build_response(self, service):
        result = _track(service, {"x-forwarded-for": "8.8.8.8", "user-agent": UA})
        
        body = service.build_response(result.visit).model_dump(by_alias=True)
        
        assert body["success"] is True
        assert body["message"] == "Visitor tracked successfully with enhanced data collection"
        assert body["data"]["tracking"] == {
            "isUnique": True, "visitCount": 1, "sessionType": "New Session",
        }
        assert body["data"]["location"]["coordinates"] == "37.4, -122.1"
        assert set(body["data"]["security"]) == {"threatLevel", "trustLevel", "fingerprint"}
    
    def test_analytics_summary(self, service):
        headers = {"x-forwarded-for": "8.8.8.8", "user-agent": UA}
        _track(service, headers, now=T0)
        _track(service, headers, now=T0 + timedelta(hours=1))
        _track(service, {"x-forwarded-for": "8.8.4.4", "user-agent": UA}, now=T0)
        
        summary = service.analytics_summary()
        
        assert summary.total_visitors == 2
        assert summary.returning_visitors == 1
        assert summary.total_visits == 3
        assert summary.return_rate == 50
        assert summary.top_countries == {"United States 🇺🇸": 3}


class TestCreateVisitStore:
    
    def test_memory_store_from_config(self):
        config = Config(visit_store_max_entries=5)
        
        store = create_visit_store(config)
        
        assert isinstance(store, InMemoryVisitStore)
        assert store.max_entries == 5
    
    def test_default_service_uses_config_window(self):
        service = VisitorTrackingService(config=Config(dedup_window_seconds=60))
        
        assert service.tracker.window == timedelta(seconds=60)
