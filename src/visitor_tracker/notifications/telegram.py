"""Telegram sink - Bot API sendMessage."""

import httpx

from visitor_tracker.common.constants import NotificationConstants
from visitor_tracker.data.schemas.visitor import EnrichedVisit
from visitor_tracker.notifications.base import NotificationSink, SinkOutcome
from visitor_tracker.notifications.formatters import build_telegram_message


class TelegramSink(NotificationSink):
    name = "telegram"
    
    def __init__(self, token: str, chat_id: str):
        self.token = token
        self.chat_id = chat_id
    
    async def notify(self, visit: EnrichedVisit, client: httpx.AsyncClient) -> SinkOutcome:
        payload = {
            "chat_id": self.chat_id,
            "text": build_telegram_message(visit),
            "parse_mode": "Markdown",
            "disable_web_page_preview": False,
        }
        url = NotificationConstants.TELEGRAM_API_URL.format(token=self.token)
        return await self._post_json(client, url, payload)
