"""Tests for the analytics counters."""

from visitor_tracker.data.schemas import GeoInfo, ThreatInfo
from visitor_tracker.tracking import VisitAnalytics


class TestVisitAnalytics:
    """Tests for VisitAnalytics."""
    
    def test_counts_unique_visits(self, make_visit):
        analytics = VisitAnalytics()
        analytics.record(make_visit())
        analytics.record(make_visit())
        
        snapshot = analytics.snapshot()
        
        assert snapshot["top_countries"] == {"United States 🇺🇸": 2}
        assert snapshot["top_browsers"] == {"Chrome": 2}
        assert snapshot["top_os"] == {"Windows": 2}
        assert snapshot["device_types"] == {"Desktop/Laptop": 2}
        assert snapshot["threat_levels"]["Low"] == 2
    
    def test_returning_visits_ignored(self, make_visit):
        analytics = VisitAnalytics()
        analytics.record(make_visit(is_unique=False))
        
        assert analytics.snapshot()["top_countries"] == {}
    
    def test_threat_levels_always_listed(self):
        snapshot = VisitAnalytics().snapshot()
        
        assert snapshot["threat_levels"] == {"Low": 0, "Medium": 0, "High": 0, "Critical": 0}
    
    def test_top_n_limits_results(self, make_visit):
        analytics = VisitAnalytics(top_n=1)
        analytics.record(make_visit(geo=GeoInfo(country="France 🇫🇷", threat_info=ThreatInfo())))
        analytics.record(make_visit())
        analytics.record(make_visit())
        
        assert analytics.snapshot()["top_countries"] == {"United States 🇺🇸": 2}
    
    def test_reset(self, make_visit):
        analytics = VisitAnalytics()
        analytics.record(make_visit())
        
        analytics.reset()
        
        assert analytics.snapshot()["top_browsers"] == {}
