"""Notification Dispatcher - concurrent fan-out to every enabled sink.

Each sink runs in its own task with its own error containment: a sink
that raises, times out or answers non-2xx yields a failed SinkOutcome and
never affects the other sinks or the response to the client.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from visitor_tracker.common.config import NotificationSettings
from visitor_tracker.common.constants import HttpConstants
from visitor_tracker.common.exceptions import TrackerException
from visitor_tracker.data.schemas.visitor import EnrichedVisit
from visitor_tracker.notifications.base import NotificationSink, SinkOutcome
from visitor_tracker.notifications.datastore import DatastoreSink
from visitor_tracker.notifications.discord import DiscordSink
from visitor_tracker.notifications.email import EmailSink
from visitor_tracker.notifications.telegram import TelegramSink

logger = logging.getLogger(__name__)


def build_sinks(settings: NotificationSettings) -> List[NotificationSink]:
    """Instantiate every sink that is enabled and fully configured."""
    sinks: List[NotificationSink] = []
    
    if settings.telegram_enabled:
        if settings.telegram_token and settings.telegram_chat_id:
            sinks.append(TelegramSink(settings.telegram_token, settings.telegram_chat_id))
        else:
            logger.warning("Telegram enabled but TELEGRAM_TOKEN/TELEGRAM_CHAT_ID missing")
    
    if settings.discord_enabled:
        if settings.discord_webhook:
            sinks.append(DiscordSink(settings.discord_webhook))
        else:
            logger.warning("Discord enabled but DISCORD_WEBHOOK missing")
    
    if settings.email_enabled:
        if settings.email_service_url and settings.email_api_key:
            sinks.append(EmailSink(
                settings.email_service_url,
                settings.email_api_key,
                recipient=settings.email_to,
            ))
        else:
            logger.warning("Email enabled but EMAIL_SERVICE_URL/EMAIL_API_KEY missing")
    
    if settings.database_enabled:
        if settings.database_url:
            sinks.append(DatastoreSink(settings.database_url, settings.database_api_key))
        else:
            logger.warning("Datastore enabled but DATABASE_URL missing")
    
    return sinks


class NotificationDispatcher:
    """Delivers one enriched visit to many sinks concurrently."""
    
    def __init__(
        self,
        timeout: float = HttpConstants.DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics=None,
    ):
        """Initialize dispatcher.
        
        Args:
            timeout: Per-sink deadline in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
            metrics: Optional MetricsCollector for delivery outcomes
        """
        self.timeout = timeout
        self._transport = transport
        self._metrics = metrics
    
    async def dispatch(
        self,
        visit: EnrichedVisit,
        sinks: Sequence[NotificationSink],
    ) -> List[SinkOutcome]:
        """Send the visit to every sink and wait for all of them.
        
        Returns:
            One SinkOutcome per sink, in the order given
        """
        if not sinks:
            return []
        
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            outcomes = await asyncio.gather(
                *(self._deliver(sink, visit, client) for sink in sinks)
            )
        
        return list(outcomes)
    
    async def _deliver(
        self,
        sink: NotificationSink,
        visit: EnrichedVisit,
        client: httpx.AsyncClient,
    ) -> SinkOutcome:
        try:
            outcome = await asyncio.wait_for(sink.notify(visit, client), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Sink {sink.name} timed out after {self.timeout}s")
            outcome = SinkOutcome(sink=sink.name, success=False, error="timeout")
        except TrackerException as e:
            logger.warning(
                f"Sink {sink.name} failed: {e.message}",
                extra={"request_id": visit.visitor.request_id, "error_info": e.to_dict()},
            )
            outcome = SinkOutcome(
                sink=sink.name,
                success=False,
                status_code=e.details.get("status_code"),
                error=e.message,
            )
        except Exception as e:
            logger.warning(
                f"Sink {sink.name} failed: {type(e).__name__}: {e}",
                extra={"request_id": visit.visitor.request_id},
            )
            outcome = SinkOutcome(
                sink=sink.name,
                success=False,
                status_code=getattr(e, "status_code", None),
                error=str(e) or type(e).__name__,
            )
        
        if self._metrics is not None:
            self._metrics.record_sink_outcome(sink.name, outcome.success)
        
        return outcome
