"""Datastore sink - appends a JSON visit record to an external store."""

from typing import Optional

import httpx

from visitor_tracker.common.constants import NotificationConstants
from visitor_tracker.data.schemas.visitor import EnrichedVisit
from visitor_tracker.notifications.base import NotificationSink, SinkOutcome
from visitor_tracker.notifications.formatters import build_datastore_entry


class DatastoreSink(NotificationSink):
    name = "datastore"
    
    def __init__(self, base_url: str, api_key: Optional[str] = None):
        self.endpoint = base_url.rstrip("/") + NotificationConstants.DATASTORE_PATH
        self.api_key = api_key
    
    async def notify(self, visit: EnrichedVisit, client: httpx.AsyncClient) -> SinkOutcome:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else None
        return await self._post_json(
            client, self.endpoint, build_datastore_entry(visit), headers=headers
        )
