"""Tests for concurrent notification fan-out."""

import asyncio
import logging

import httpx

from visitor_tracker.common.config import NotificationSettings
from visitor_tracker.common.exceptions import NotificationError
from visitor_tracker.notifications import (
    DatastoreSink,
    DiscordSink,
    EmailSink,
    NotificationDispatcher,
    NotificationSink,
    SinkOutcome,
    TelegramSink,
    build_sinks,
)


class StaticSink(NotificationSink):
    def __init__(self, name: str):
        self.name = name
        self.calls = 0
    
    async def notify(self, visit, client):
        self.calls += 1
        return SinkOutcome(sink=self.name, success=True, status_code=200)


class BrokenSink(NotificationSink):
    name = "broken"
    
    async def notify(self, visit, client):
        raise RuntimeError("boom")


class RejectingSink(NotificationSink):
    name = "rejecting"
    
    async def notify(self, visit, client):
        raise NotificationError("rejecting returned HTTP 403", sink=self.name, status_code=403)


class SlowSink(NotificationSink):
    name = "slow"
    
    async def notify(self, visit, client):
        await asyncio.sleep(5)
        return SinkOutcome(sink=self.name, success=True)


def _dispatch(dispatcher, visit, sinks):
    return asyncio.run(dispatcher.dispatch(visit, sinks))


class TestNotificationDispatcher:
    """Failure isolation between sinks."""
    
    def test_no_sinks(self, make_visit):
        assert _dispatch(NotificationDispatcher(), make_visit(), []) == []
    
    def test_failing_sink_does_not_affect_others(self, make_visit):
        first, last = StaticSink("first"), StaticSink("last")
        
        outcomes = _dispatch(NotificationDispatcher(), make_visit(), [first, BrokenSink(), last])
        
        assert [o.sink for o in outcomes] == ["first", "broken", "last"]
        assert [o.success for o in outcomes] == [True, False, True]
        assert outcomes[1].error == "boom"
        assert first.calls == last.calls == 1
    
    def test_slow_sink_times_out(self, make_visit):
        dispatcher = NotificationDispatcher(timeout=0.05)
        
        outcomes = _dispatch(dispatcher, make_visit(), [SlowSink(), StaticSink("fast")])
        
        assert outcomes[0].success is False
        assert outcomes[0].error == "timeout"
        assert outcomes[1].success is True
    
    def test_http_error_status_becomes_failed_outcome(self, make_visit):
        def handler(request):
            if "discord" in request.url.host:
                return httpx.Response(500)
            return httpx.Response(200, json={"ok": True})
        
        dispatcher = NotificationDispatcher(transport=httpx.MockTransport(handler))
        sinks = [DiscordSink("https://discord.test/hook"), TelegramSink("T", "1")]
        
        outcomes = _dispatch(dispatcher, make_visit(), sinks)
        
        assert outcomes[0].success is False
        assert outcomes[0].status_code == 500
        assert outcomes[1].success is True
    
    def test_tracker_error_logged_with_details(self, make_visit, caplog):
        caplog.set_level(logging.WARNING, logger="visitor_tracker.notifications.dispatcher")
        
        outcomes = _dispatch(NotificationDispatcher(), make_visit(), [RejectingSink()])
        
        assert outcomes[0].status_code == 403
        assert outcomes[0].error == "rejecting returned HTTP 403"
        record = caplog.records[-1]
        assert record.error_info == {
            "error": "NOTIFICATION_ERROR",
            "message": "rejecting returned HTTP 403",
            "details": {"sink": "rejecting", "status_code": 403},
        }
        assert record.request_id == "VT-1760702400000-0123456789abcdef"
    
    def test_outcomes_reported_to_metrics(self, make_visit):
        class Recorder:
            def __init__(self):
                self.calls = []
            
            def record_sink_outcome(self, sink, success):
                self.calls.append((sink, success))
        
        metrics = Recorder()
        dispatcher = NotificationDispatcher(metrics=metrics)
        
        _dispatch(dispatcher, make_visit(), [StaticSink("ok"), BrokenSink()])
        
        assert sorted(metrics.calls) == [("broken", False), ("ok", True)]


class TestBuildSinks:
    """Sinks are gated by their enable flag and credentials."""
    
    def test_nothing_enabled(self):
        assert build_sinks(NotificationSettings()) == []
    
    def test_all_enabled(self):
        settings = NotificationSettings(
            telegram_enabled=True, telegram_token="t", telegram_chat_id="c",
            discord_enabled=True, discord_webhook="https://discord.test/hook",
            email_enabled=True, email_service_url="https://mail.test", email_api_key="k",
            database_enabled=True, database_url="https://store.test",
        )
        
        sinks = build_sinks(settings)
        
        assert [type(s) for s in sinks] == [TelegramSink, DiscordSink, EmailSink, DatastoreSink]
    
    def test_enabled_without_credentials_is_skipped(self):
        settings = NotificationSettings(telegram_enabled=True, telegram_token="t")
        
        assert build_sinks(settings) == []
    
    def test_credentials_without_flag_are_ignored(self):
        settings = NotificationSettings(discord_webhook="https://discord.test/hook")
        
        assert build_sinks(settings) == []
    
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DISCORD_ENABLED", "true")
        monkeypatch.setenv("DISCORD_WEBHOOK", "https://discord.test/hook")
        
        sinks = build_sinks(NotificationSettings.from_env())
        
        assert len(sinks) == 1
        assert sinks[0].webhook_url == "https://discord.test/hook"
