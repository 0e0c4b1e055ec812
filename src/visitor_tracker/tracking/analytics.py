"""Visit Analytics - per-process counters for the analytics summary."""

import threading
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from visitor_tracker.data.schemas.visitor import EnrichedVisit


class VisitAnalytics:
    """Counts countries, browsers, operating systems, device types and
    threat levels over unique visits.
    
    Counters are process-local and reset on restart; visitor counts in
    the summary come from the visit store.
    """
    
    THREAT_LEVELS = ("Low", "Medium", "High", "Critical")
    
    def __init__(self, top_n: int = 5):
        self.top_n = top_n
        self._lock = threading.Lock()
        self._countries: Counter = Counter()
        self._browsers: Counter = Counter()
        self._operating_systems: Counter = Counter()
        self._device_types: Counter = Counter()
        self._threat_levels: Counter = Counter()
    
    def record(self, visit: EnrichedVisit) -> None:
        """Count a visit. Returning visits inside the window are ignored."""
        if not visit.visitor.is_unique:
            return
        
        with self._lock:
            self._countries[visit.geo.country] += 1
            self._browsers[visit.device.browser.split(" ")[0]] += 1
            self._operating_systems[visit.device.platform] += 1
            self._device_types[visit.device.device] += 1
            self._threat_levels[visit.geo.threat_info.threat_level] += 1
    
    def _top(self, counter: Counter) -> Dict[str, int]:
        items: List[Tuple[str, int]] = counter.most_common(self.top_n)
        return dict(items)
    
    def snapshot(self) -> Dict[str, object]:
        """Return the current counters."""
        with self._lock:
            threat_levels = {level: self._threat_levels.get(level, 0) for level in self.THREAT_LEVELS}
            return {
                "top_countries": self._top(self._countries),
                "top_browsers": self._top(self._browsers),
                "top_os": self._top(self._operating_systems),
                "device_types": self._top(self._device_types),
                "threat_levels": threat_levels,
                "last_updated": datetime.now(timezone.utc).isoformat(),
            }
    
    def reset(self) -> None:
        with self._lock:
            for counter in (
                self._countries, self._browsers, self._operating_systems,
                self._device_types, self._threat_levels,
            ):
                counter.clear()
