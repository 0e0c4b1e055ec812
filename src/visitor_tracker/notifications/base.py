"""Notification sink interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from visitor_tracker.common.constants import HttpConstants
from visitor_tracker.common.exceptions import NotificationError
from visitor_tracker.data.schemas.visitor import EnrichedVisit


@dataclass
class SinkOutcome:
    """Result of delivering one visit to one sink."""
    sink: str
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class NotificationSink(ABC):
    """A destination that receives every enriched visit.
    
    Implementations raise on failure; the dispatcher turns exceptions into
    a failed SinkOutcome so one sink never affects another.
    """
    
    name: str = "sink"
    
    @abstractmethod
    async def notify(self, visit: EnrichedVisit, client: httpx.AsyncClient) -> SinkOutcome:
        """Deliver a visit.
        
        Args:
            visit: Enriched visit record
            client: Shared HTTP client for this fan-out
        
        Returns:
            SinkOutcome with the response status
        
        Raises:
            NotificationError: On a non-2xx response
            httpx.HTTPError: On transport failure
        """
        pass
    
    async def _post_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict,
        headers: Optional[dict] = None,
    ) -> SinkOutcome:
        response = await client.post(url, json=payload, headers=headers)
        
        if not (HttpConstants.SUCCESS_MIN <= response.status_code <= HttpConstants.SUCCESS_MAX):
            raise NotificationError(
                f"{self.name} returned HTTP {response.status_code}",
                sink=self.name,
                status_code=response.status_code,
            )
        
        return SinkOutcome(sink=self.name, success=True, status_code=response.status_code)
