"""Notifications - sinks, formatters and the concurrent dispatcher."""

from visitor_tracker.notifications.base import NotificationSink, SinkOutcome
from visitor_tracker.notifications.datastore import DatastoreSink
from visitor_tracker.notifications.discord import DiscordSink
from visitor_tracker.notifications.dispatcher import NotificationDispatcher, build_sinks
from visitor_tracker.notifications.email import EmailSink
from visitor_tracker.notifications.telegram import TelegramSink

__all__ = [
    "NotificationSink",
    "SinkOutcome",
    "TelegramSink",
    "DiscordSink",
    "EmailSink",
    "DatastoreSink",
    "NotificationDispatcher",
    "build_sinks",
]
