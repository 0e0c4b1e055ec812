"""Visitor Tracking Service - core request flow for the tracking endpoint.

Orchestrates:
1. Visit classification against the visit store
2. Device parsing and geolocation, concurrently
3. Session analysis
4. Analytics counters
5. Notification fan-out, awaited before the response is built

Enrichment and notification failures degrade to sentinels or failed
SinkOutcomes; only an unexpected fault reaches the gateway.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional

from visitor_tracker.api.extraction import (
    build_visitor_data,
    extract_client_ip,
    generate_request_id,
)
from visitor_tracker.api.schemas import (
    AnalyticsSummary,
    DeviceSummary,
    LocationSummary,
    LogData,
    LogResponse,
    SecuritySummary,
    TrackingSummary,
)
from visitor_tracker.common.config import Config, NotificationSettings, VisitStoreType
from visitor_tracker.common.constants import RequestConstants
from visitor_tracker.data.schemas.visitor import EnrichedVisit
from visitor_tracker.enrichment.device import DeviceParser
from visitor_tracker.enrichment.geo import GeoResolver
from visitor_tracker.enrichment.session import SessionAnalyzer
from visitor_tracker.notifications import NotificationDispatcher, SinkOutcome, build_sinks
from visitor_tracker.tracking import InMemoryVisitStore, VisitAnalytics, VisitStore, VisitTracker

logger = logging.getLogger(__name__)


@dataclass
class TrackingResult:
    """Everything produced while handling one tracking request."""
    visit: EnrichedVisit
    outcomes: List[SinkOutcome] = field(default_factory=list)


class VisitorTrackingService:
    """Service for tracking visits.
    
    All collaborators are injectable so tests can supply mock transports,
    fixed clocks and in-memory stores.
    """
    
    def __init__(
        self,
        config: Optional[Config] = None,
        tracker: Optional[VisitTracker] = None,
        geo_resolver: Optional[GeoResolver] = None,
        device_parser: Optional[DeviceParser] = None,
        session_analyzer: Optional[SessionAnalyzer] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        analytics: Optional[VisitAnalytics] = None,
        notification_settings: Optional[Callable[[], NotificationSettings]] = None,
        metrics=None,
    ):
        """Initialize the service.
        
        Args:
            config: Application configuration. Defaults are used if not provided.
            tracker: Visit tracker. Built from config if not provided.
            geo_resolver: Geolocation resolver
            device_parser: User-agent parser
            session_analyzer: Session analyzer
            dispatcher: Notification dispatcher
            analytics: Analytics counters
            notification_settings: Callable returning the sink settings,
                evaluated on every request. Reads the environment by default.
            metrics: Optional MetricsCollector
        """
        self.config = config or Config()
        self.metrics = metrics
        self.tracker = tracker or VisitTracker(
            store=create_visit_store(self.config),
            window=self.config.dedup_window,
        )
        self.geo_resolver = geo_resolver or GeoResolver(
            timeout=self.config.http_timeout_seconds,
            metrics=metrics,
        )
        self.device_parser = device_parser or DeviceParser()
        self.session_analyzer = session_analyzer or SessionAnalyzer()
        self.dispatcher = dispatcher or NotificationDispatcher(
            timeout=self.config.http_timeout_seconds,
            metrics=metrics,
        )
        self.analytics = analytics or VisitAnalytics()
        self._notification_settings = notification_settings or NotificationSettings.from_env
        self._zone = self.config.display_zone
    
    def shutdown(self) -> None:
        """Flush pending metrics."""
        if self.metrics is not None:
            self.metrics.shutdown()
            logger.info("VisitorTrackingService metrics flushed")
    
    async def track(
        self,
        headers: Mapping[str, str],
        method: str,
        peer: Optional[str] = None,
        now: Optional[datetime] = None,
        request_id: Optional[str] = None,
    ) -> TrackingResult:
        """Track one request.
        
        Args:
            headers: Request headers keyed by lower-case name
            method: HTTP method
            peer: Socket peer address, used when no proxy header is present
            now: Observation time (defaults to current UTC time)
            request_id: Identifier to use (generated if not provided)
            
        Returns:
            TrackingResult with the enriched visit and sink outcomes
        """
        started = time.perf_counter()
        now = now or datetime.now(timezone.utc)
        request_id = request_id or generate_request_id()
        
        ip = extract_client_ip(headers, peer)
        user_agent = headers.get("user-agent") or RequestConstants.UNKNOWN_USER_AGENT
        
        # The store may block on network I/O (DynamoDB)
        classification = await asyncio.to_thread(self.tracker.track, ip, user_agent, now)
        
        device, geo = await asyncio.gather(
            asyncio.to_thread(
                self.device_parser.parse,
                user_agent,
                headers.get("accept-language"),
                headers,
            ),
            self.geo_resolver.resolve(ip),
        )
        
        visitor = build_visitor_data(
            headers, ip, method, classification, request_id, self._zone, now
        )
        session = self.session_analyzer.analyze(headers, visitor, classification.is_unique)
        visit = EnrichedVisit(visitor=visitor, geo=geo, device=device, session=session)
        
        self.analytics.record(visit)
        
        sinks = build_sinks(self._notification_settings())
        outcomes = await self.dispatcher.dispatch(visit, sinks)
        
        failed = [o.sink for o in outcomes if not o.success]
        if failed:
            logger.warning(
                f"Notification delivery failed for {failed}",
                extra={"request_id": request_id},
            )
        
        latency_ms = (time.perf_counter() - started) * 1000
        if self.metrics is not None:
            self.metrics.record_visit(classification.is_unique, latency_ms)
        
        logger.info(
            "Visit tracked",
            extra={
                "request_id": request_id,
                "is_unique": classification.is_unique,
                "visit_count": classification.visit_count,
                "sinks": len(outcomes),
                "latency_ms": f"{latency_ms:.1f}",
            }
        )
        
        return TrackingResult(visit=visit, outcomes=outcomes)
    
    @staticmethod
    def build_response(visit: EnrichedVisit) -> LogResponse:
        """Build the public response. Only summary fields are exposed."""
        visitor, geo, device, session = visit.visitor, visit.geo, visit.device, visit.session
        
        return LogResponse(
            data=LogData(
                request_id=visitor.request_id,
                timestamp=visitor.timestamp,
                tracking=TrackingSummary(
                    is_unique=visitor.is_unique,
                    visit_count=visitor.visit_count,
                    session_type=session.session_type,
                ),
                location=LocationSummary(
                    country=geo.country,
                    city=geo.city,
                    coordinates=geo.coordinates,
                ),
                device=DeviceSummary(
                    type=device.device,
                    browser=device.browser,
                    os=device.os,
                ),
                security=SecuritySummary(
                    threat_level=geo.threat_info.threat_level,
                    trust_level=session.trust_level,
                    fingerprint=session.fingerprint,
                ),
            )
        )
    
    def analytics_summary(self) -> AnalyticsSummary:
        """Combine visit store statistics with the analytics counters.
        
        May block on the visit store; call from a worker thread.
        """
        stats = self.tracker.store.stats()
        counters = self.analytics.snapshot()
        
        return_rate = (
            round(stats.returning / stats.identities * 100) if stats.identities else 0
        )
        
        return AnalyticsSummary(
            total_visitors=stats.identities,
            unique_visitors=stats.identities,
            returning_visitors=stats.returning,
            total_visits=stats.total_visits,
            return_rate=return_rate,
            top_countries=counters["top_countries"],
            top_browsers=counters["top_browsers"],
            top_os=counters["top_os"],
            device_types=counters["device_types"],
            threat_levels=counters["threat_levels"],
            last_updated=counters["last_updated"],
        )


def create_visit_store(config: Config) -> VisitStore:
    """Build the visit store selected by TRACKER_VISIT_STORE."""
    if config.visit_store == VisitStoreType.DYNAMODB:
        from visitor_tracker.tracking.dynamodb_store import DynamoDBVisitStore
        
        return DynamoDBVisitStore(
            table_name=config.dynamodb_table,
            region=config.aws_region,
            retention=config.visit_retention,
        )
    
    return InMemoryVisitStore(
        max_entries=config.visit_store_max_entries,
        retention=config.visit_retention,
    )
