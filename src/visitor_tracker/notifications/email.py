"""Email sink - posts an HTML report to a transactional email service."""

from typing import Optional

import httpx

from visitor_tracker.data.schemas.visitor import EnrichedVisit
from visitor_tracker.notifications.base import NotificationSink, SinkOutcome
from visitor_tracker.notifications.formatters import build_email_html, build_email_subject


class EmailSink(NotificationSink):
    """Sends ``{to, subject, html}`` to the service URL with a Bearer token."""
    
    name = "email"
    
    def __init__(self, service_url: str, api_key: str, recipient: Optional[str] = None):
        self.service_url = service_url
        self.api_key = api_key
        self.recipient = recipient
    
    async def notify(self, visit: EnrichedVisit, client: httpx.AsyncClient) -> SinkOutcome:
        payload = {
            "to": self.recipient,
            "subject": build_email_subject(visit),
            "html": build_email_html(visit),
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        return await self._post_json(client, self.service_url, payload, headers=headers)
