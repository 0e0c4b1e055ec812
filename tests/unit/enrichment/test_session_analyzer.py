"""Tests for fingerprinting and trust scoring."""

import hashlib

import pytest

from visitor_tracker.enrichment.session import (
    SessionAnalyzer,
    generate_fingerprint,
    generate_visitor_hash,
)

BROWSER_HEADERS = {
    "sec-fetch-site": "cross-site",
    "sec-fetch-mode": "no-cors",
    "sec-fetch-dest": "image",
    "accept-language": "en-US,en;q=0.9",
    "accept-encoding": "gzip, deflate, br",
    "cache-control": "no-cache",
    "dnt": "1",
}


@pytest.fixture
def analyzer():
    return SessionAnalyzer()


class TestFingerprint:
    
    def test_deterministic(self):
        first = generate_fingerprint("8.8.8.8", "ua", "en", "gzip")
        second = generate_fingerprint("8.8.8.8", "ua", "en", "gzip")
        
        assert first == second
        assert len(first) == 16
    
    def test_matches_sha256_prefix(self):
        expected = hashlib.sha256(b"8.8.8.8:ua:en:gzip").hexdigest()[:16]
        
        assert generate_fingerprint("8.8.8.8", "ua", "en", "gzip") == expected
    
    def test_changes_with_accept_headers(self):
        assert (
            generate_fingerprint("8.8.8.8", "ua", "en", "gzip")
            != generate_fingerprint("8.8.8.8", "ua", "fr", "gzip")
        )
    
    def test_visitor_hash(self):
        expected = hashlib.md5(b"8.8.8.8:ua").hexdigest()[:12]
        
        assert generate_visitor_hash("8.8.8.8", "ua") == expected


class TestTrustScore:
    
    def test_baseline_without_signals(self, analyzer):
        assert analyzer.trust_score({}) == 50
        assert analyzer.trust_level(50) == "Low"
    
    def test_full_browser_signals(self, analyzer):
        # 50 + 30 fetch metadata + 5 languages + 5 gzip + 5 cache + 10 dnt
        assert analyzer.trust_score(BROWSER_HEADERS) == 105
    
    def test_single_language_adds_nothing(self, analyzer):
        assert analyzer.trust_score({"accept-language": "en"}) == 50
    
    def test_dnt_must_be_one(self, analyzer):
        assert analyzer.trust_score({"dnt": "0"}) == 50
    
    def test_adding_headers_never_lowers_score(self, analyzer):
        headers = {}
        previous = analyzer.trust_score(headers)
        for name, value in BROWSER_HEADERS.items():
            headers[name] = value
            score = analyzer.trust_score(headers)
            assert score >= previous
            previous = score
    
    @pytest.mark.parametrize("score,level", [
        (59, "Low"),
        (60, "Medium"),
        (79, "Medium"),
        (80, "High"),
        (105, "High"),
    ])
    def test_trust_level_thresholds(self, analyzer, score, level):
        assert analyzer.trust_level(score) == level


class TestAnalyze:
    
    def test_new_session(self, analyzer, make_visit):
        visitor = make_visit().visitor
        
        session = analyzer.analyze(BROWSER_HEADERS, visitor, is_unique=True)
        
        assert session.session_type == "New Session"
        assert session.trust_level == "High"
        assert session.fingerprint == generate_fingerprint(
            visitor.ip, visitor.user_agent, "en-US,en;q=0.9", "gzip, deflate, br"
        )
        assert session.session_id.startswith(f"{session.visitor_hash}-")
    
    def test_returning_session(self, analyzer, make_visit):
        session = analyzer.analyze({}, make_visit().visitor, is_unique=False)
        
        assert session.session_type == "Returning Session"
        assert session.trust_level == "Low"
