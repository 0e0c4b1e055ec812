"""Discord sink - webhook with a rich embed."""

import httpx

from visitor_tracker.common.constants import NotificationConstants
from visitor_tracker.data.schemas.visitor import EnrichedVisit
from visitor_tracker.notifications.base import NotificationSink, SinkOutcome
from visitor_tracker.notifications.formatters import build_discord_embed


class DiscordSink(NotificationSink):
    name = "discord"
    
    def __init__(self, webhook_url: str):
        self.webhook_url = webhook_url
    
    async def notify(self, visit: EnrichedVisit, client: httpx.AsyncClient) -> SinkOutcome:
        payload = {
            "username": NotificationConstants.TRACKER_NAME,
            "avatar_url": NotificationConstants.AVATAR_URL,
            **build_discord_embed(visit),
        }
        return await self._post_json(client, self.webhook_url, payload)
