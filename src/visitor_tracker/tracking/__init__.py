"""Tracking module - visitor identity, dedup state and visit counters.

Components:
- VisitTracker: Classifies visits against a visit store
- VisitStore: Abstract base class for visit state backends
- InMemoryVisitStore: Bounded process-local store
- DynamoDBVisitStore: Shared store for multi-instance deployments
- VisitAnalytics: Per-process counters for the analytics summary
"""

from visitor_tracker.tracking.store import (
    InMemoryVisitStore,
    VisitRecord,
    VisitStore,
    VisitStoreStats,
)
from visitor_tracker.tracking.tracker import VisitTracker, derive_identity
from visitor_tracker.tracking.analytics import VisitAnalytics

__all__ = [
    "InMemoryVisitStore",
    "VisitRecord",
    "VisitStore",
    "VisitStoreStats",
    "VisitTracker",
    "derive_identity",
    "VisitAnalytics",
]
