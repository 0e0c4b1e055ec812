"""Monitoring - visit, geolocation and notification counters for CloudWatch."""

import logging
import os
import queue
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from visitor_tracker.common.constants import MonitoringConstants

logger = logging.getLogger(__name__)

# CloudWatch accepts at most this many datums per PutMetricData call.
CLOUDWATCH_MAX_BATCH = 20


class MetricType(str, Enum):
    UNIQUE_VISIT = "unique_visit"
    RETURNING_VISIT = "returning_visit"
    GEO_LOOKUP = "geo_lookup"
    SINK_DELIVERY = "sink_delivery"
    REQUEST_LATENCY = "request_latency"


@dataclass
class MetricPoint:
    metric_name: str
    value: float
    unit: str = "None"
    timestamp: Optional[datetime] = None
    dimensions: Optional[Dict[str, str]] = None
    
    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class MetricsCollector:
    """Buffers metric points and publishes them to CloudWatch in batches.
    
    Full batches are handed to a background publisher thread, so recording
    never makes a CloudWatch call on the caller's thread (the event loop, in
    the API). Publishing is best effort: a failed batch is logged and
    dropped so a CloudWatch outage never reaches a request.
    """
    
    DEFAULT_REGION = "us-east-1"
    
    def __init__(self, namespace: Optional[str] = None, region: Optional[str] = None,
                 aws_profile: Optional[str] = None,
                 batch_size: int = MonitoringConstants.DEFAULT_BATCH_SIZE,
                 max_queue_size: int = MonitoringConstants.PUBLISH_QUEUE_SIZE):
        self.namespace = namespace or os.environ.get(
            "CLOUDWATCH_NAMESPACE", MonitoringConstants.DEFAULT_NAMESPACE
        )
        self.region = region or os.environ.get("AWS_DEFAULT_REGION", self.DEFAULT_REGION)
        self.batch_size = batch_size
        self.metric_buffer: List[MetricPoint] = []
        self._lock = threading.Lock()
        
        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.cloudwatch = session.client("cloudwatch", region_name=self.region)
        else:
            self.cloudwatch = boto3.client("cloudwatch", region_name=self.region)
        
        self._queue: "queue.Queue[Optional[List[MetricPoint]]]" = queue.Queue(
            maxsize=max_queue_size
        )
        self._shutdown_event = threading.Event()
        self._batches_dropped = 0
        self._publisher_thread = threading.Thread(
            target=self._publisher_loop,
            name="MetricsPublisher",
            daemon=True,
        )
        self._publisher_thread.start()
        
        logger.info(f"Initialized MetricsCollector: namespace={self.namespace}")
    
    def record_metric(self, metric: MetricPoint) -> None:
        """Buffer a metric point; a full batch is queued for the publisher."""
        with self._lock:
            self.metric_buffer.append(metric)
            if len(self.metric_buffer) < self.batch_size:
                return
            batch = list(self.metric_buffer)
            self.metric_buffer.clear()
        
        if self._shutdown_event.is_set():
            self._publish(batch)
            return
        
        try:
            self._queue.put_nowait(batch)
        except queue.Full:
            with self._lock:
                self._batches_dropped += 1
            logger.error(f"Metrics publish queue full, dropped {len(batch)} points")
    
    @property
    def batches_dropped(self) -> int:
        with self._lock:
            return self._batches_dropped
    
    def _publisher_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                batch = self._queue.get(timeout=MonitoringConstants.QUEUE_GET_TIMEOUT)
            except queue.Empty:
                continue
            
            try:
                if batch is None:
                    break
                self._publish(batch)
            finally:
                self._queue.task_done()
        
        self._drain_queue()
    
    def _drain_queue(self) -> None:
        while True:
            try:
                batch = self._queue.get_nowait()
            except queue.Empty:
                break
            try:
                if batch is not None:
                    self._publish(batch)
            finally:
                self._queue.task_done()
    
    def wait_for_publish(self) -> None:
        """Block until every queued batch has been handed to CloudWatch."""
        self._queue.join()
    
    def record_visit(self, is_unique: bool, latency_ms: Optional[float] = None) -> None:
        """Record one tracked request.
        
        Args:
            is_unique: Classification returned by the visit tracker
            latency_ms: End-to-end handling time, if measured
        """
        self.record_metric(MetricPoint(
            metric_name=(
                MetricType.UNIQUE_VISIT.value if is_unique
                else MetricType.RETURNING_VISIT.value
            ),
            value=1.0,
            unit="Count",
        ))
        
        if latency_ms is not None:
            self.record_metric(MetricPoint(
                metric_name=MetricType.REQUEST_LATENCY.value,
                value=latency_ms,
                unit="Milliseconds",
            ))
    
    def record_geo_lookup(self, provider: str, success: bool) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.GEO_LOOKUP.value,
            value=1.0,
            unit="Count",
            dimensions={
                "provider": provider,
                "outcome": "success" if success else "failure",
            },
        ))
    
    def record_sink_outcome(self, sink: str, success: bool) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.SINK_DELIVERY.value,
            value=1.0,
            unit="Count",
            dimensions={
                "sink": sink,
                "outcome": "success" if success else "failure",
            },
        ))
    
    def flush(self) -> None:
        """Publish buffered metrics to CloudWatch on the calling thread.
        
        Blocking; call it off the event loop.
        """
        with self._lock:
            pending = list(self.metric_buffer)
            self.metric_buffer.clear()
        
        self._publish(pending)
    
    def _publish(self, pending: List[MetricPoint]) -> None:
        if not pending:
            return
        
        metric_data = []
        for metric in pending:
            metric_dict = {
                "MetricName": metric.metric_name,
                "Value": metric.value,
                "Unit": metric.unit,
                "Timestamp": metric.timestamp,
            }
            
            if metric.dimensions:
                metric_dict["Dimensions"] = [
                    {"Name": k, "Value": str(v)}
                    for k, v in metric.dimensions.items()
                ]
            
            metric_data.append(metric_dict)
        
        try:
            for i in range(0, len(metric_data), CLOUDWATCH_MAX_BATCH):
                self.cloudwatch.put_metric_data(
                    Namespace=self.namespace,
                    MetricData=metric_data[i:i + CLOUDWATCH_MAX_BATCH],
                )
            logger.debug(f"Published {len(pending)} metrics to CloudWatch")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to publish {len(pending)} metrics: {e}")
    
    def shutdown(self, timeout: float = MonitoringConstants.SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Stop the publisher, then flush queued and buffered metrics."""
        if not self._shutdown_event.is_set():
            self._shutdown_event.set()
            try:
                self._queue.put_nowait(None)
            except queue.Full:
                pass
            
            if self._publisher_thread.is_alive():
                self._publisher_thread.join(timeout=timeout)
                if self._publisher_thread.is_alive():
                    logger.warning("Metrics publisher did not stop cleanly")
            self._drain_queue()
        
        self.flush()
