"""Visit Store - Abstraction for per-identity visit state.

The store owns every VisitRecord and performs the dedup
check-and-update as one atomic operation, so a store backed by a
shared cache can replace the in-process one without changing callers.

Lifecycle: the in-memory store is bounded by capacity (least recently
seen identities are evicted first) and by an idle expiry; an expired
identity is treated as never seen.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import logging
import threading

from visitor_tracker.common.constants import TrackingConstants
from visitor_tracker.data.schemas.visit import VisitClassification


logger = logging.getLogger(__name__)


@dataclass
class VisitRecord:
    """Visit counters for one identity."""
    first_visit_at: datetime
    last_visit_at: datetime
    visit_count: int = 1
    
    def to_classification(self, is_unique: bool) -> VisitClassification:
        return VisitClassification(
            is_unique=is_unique,
            visit_count=self.visit_count,
            first_visit=self.first_visit_at,
            last_visit=self.last_visit_at,
        )


@dataclass
class VisitStoreStats:
    """Aggregate counts over the records currently held."""
    identities: int = 0
    returning: int = 0
    total_visits: int = 0


class VisitStore(ABC):
    """Abstract base class for visit state backends.
    
    Implementations must make ``record_visit`` atomic per identity: two
    concurrent observations of the same identity inside one window must
    never both be classified unique.
    """
    
    @abstractmethod
    def record_visit(
        self, identity: str, now: datetime, window: timedelta
    ) -> VisitClassification:
        """Classify an observation and update the identity's record.
        
        Args:
            identity: Derived visitor identity key
            now: Observation time
            window: Dedup window
            
        Returns:
            VisitClassification for this observation
        """
        pass
    
    @abstractmethod
    def get(self, identity: str) -> Optional[VisitRecord]:
        """Return the record for an identity, if one is held."""
        pass
    
    @abstractmethod
    def stats(self) -> VisitStoreStats:
        """Return aggregate counts over held records."""
        pass
    
    @abstractmethod
    def clear(self) -> None:
        """Drop all records."""
        pass


class InMemoryVisitStore(VisitStore):
    """Process-local visit store with LRU capacity and idle expiry.
    
    Thread-safe: every read-modify-write runs under one lock.
    """
    
    def __init__(
        self,
        max_entries: int = TrackingConstants.DEFAULT_MAX_ENTRIES,
        retention: timedelta = timedelta(seconds=TrackingConstants.DEFAULT_RETENTION_SECONDS),
    ):
        """Initialize the store.
        
        Args:
            max_entries: Maximum identities held before LRU eviction
            retention: Idle time after the last unique visit before a
                record expires
        """
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.retention = retention
        self._records: "OrderedDict[str, VisitRecord]" = OrderedDict()
        self._lock = threading.Lock()
        self._evictions = 0
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
    
    @property
    def evictions(self) -> int:
        return self._evictions
    
    def record_visit(
        self, identity: str, now: datetime, window: timedelta
    ) -> VisitClassification:
        with self._lock:
            record = self._records.get(identity)
            
            if record is not None and now - record.last_visit_at > self.retention:
                del self._records[identity]
                record = None
            
            if record is None:
                record = VisitRecord(first_visit_at=now, last_visit_at=now, visit_count=1)
                self._records[identity] = record
                self._evict_overflow()
                return record.to_classification(is_unique=True)
            
            self._records.move_to_end(identity)
            
            # Returning visits inside the window do not extend it.
            if now - record.last_visit_at > window:
                record.visit_count += 1
                record.last_visit_at = now
                return record.to_classification(is_unique=True)
            
            return record.to_classification(is_unique=False)
    
    def get(self, identity: str) -> Optional[VisitRecord]:
        with self._lock:
            record = self._records.get(identity)
            if record is None:
                return None
            return VisitRecord(
                first_visit_at=record.first_visit_at,
                last_visit_at=record.last_visit_at,
                visit_count=record.visit_count,
            )
    
    def sweep(self, now: datetime) -> int:
        """Remove records idle for longer than the retention period.
        
        Returns:
            Number of records removed
        """
        with self._lock:
            expired = [
                identity for identity, record in self._records.items()
                if now - record.last_visit_at > self.retention
            ]
            for identity in expired:
                del self._records[identity]
        
        if expired:
            logger.debug(f"Swept {len(expired)} expired visit records")
        return len(expired)
    
    def stats(self) -> VisitStoreStats:
        with self._lock:
            records = list(self._records.values())
        return VisitStoreStats(
            identities=len(records),
            returning=sum(1 for r in records if r.visit_count > 1),
            total_visits=sum(r.visit_count for r in records),
        )
    
    def clear(self) -> None:
        with self._lock:
            self._records.clear()
    
    def _evict_overflow(self) -> None:
        # Caller holds the lock.
        while len(self._records) > self.max_entries:
            identity, _ = self._records.popitem(last=False)
            self._evictions += 1
            logger.debug(f"Evicted visit record {identity[:8]}")
