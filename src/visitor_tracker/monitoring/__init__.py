"""Monitoring - CloudWatch metrics for the tracker."""

from visitor_tracker.monitoring.metrics import MetricPoint, MetricsCollector, MetricType

__all__ = ["MetricPoint", "MetricsCollector", "MetricType"]
