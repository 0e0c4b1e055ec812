"""Identity & Dedup Tracker.

Derives a visitor identity from client address and user agent and
classifies each observation as a new visit or a return within the
dedup window.
"""

import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from visitor_tracker.common.constants import TrackingConstants
from visitor_tracker.data.schemas.visit import VisitClassification
from visitor_tracker.tracking.store import InMemoryVisitStore, VisitStore

logger = logging.getLogger(__name__)


def derive_identity(address: str, user_agent: str) -> str:
    """Stable identity key for an (address, user agent) pair."""
    return hashlib.md5(f"{address}:{user_agent}".encode("utf-8")).hexdigest()


class VisitTracker:
    """Classifies visits against an injectable visit store.
    
    A visit is unique when the identity has no record, or when more than
    ``window`` has elapsed since its last unique visit. Elapsed time equal
    to the window still counts as the same visit.
    """
    
    def __init__(
        self,
        store: Optional[VisitStore] = None,
        window: timedelta = timedelta(seconds=TrackingConstants.DEFAULT_WINDOW_SECONDS),
    ):
        """Initialize the tracker.
        
        Args:
            store: Visit state backend. An in-memory store is created if
                not provided.
            window: Default dedup window
        """
        if window <= timedelta(0):
            raise ValueError("window must be positive")
        self.store = store or InMemoryVisitStore()
        self.window = window
    
    def classify(
        self,
        identity: str,
        now: Optional[datetime] = None,
        window: Optional[timedelta] = None,
    ) -> VisitClassification:
        """Classify one observation of an identity.
        
        Args:
            identity: Derived identity key
            now: Observation time (defaults to current UTC time)
            window: Dedup window override
            
        Returns:
            VisitClassification with uniqueness and counters
        """
        now = now or datetime.now(timezone.utc)
        result = self.store.record_visit(identity, now, window or self.window)
        
        logger.debug(
            "Visit classified",
            extra={
                "identity": identity[:8],
                "is_unique": result.is_unique,
                "visit_count": result.visit_count,
            }
        )
        return result
    
    def track(
        self,
        address: str,
        user_agent: str,
        now: Optional[datetime] = None,
    ) -> VisitClassification:
        """Derive the identity for a request and classify it."""
        return self.classify(derive_identity(address, user_agent), now)
