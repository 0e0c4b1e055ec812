"""Session Analyzer - module init."""

from visitor_tracker.enrichment.session.analyzer import (
    SessionAnalyzer,
    generate_fingerprint,
    generate_visitor_hash,
)

__all__ = ["SessionAnalyzer", "generate_fingerprint", "generate_visitor_hash"]
