"""Tests for the CloudWatch metrics collector."""

import threading
from unittest.mock import patch

from botocore.exceptions import ClientError

from visitor_tracker.monitoring import MetricPoint, MetricsCollector, MetricType


@patch("visitor_tracker.monitoring.metrics.boto3.client")
class TestMetricsCollector:
    """Test MetricsCollector with a mocked CloudWatch client."""
    
    def test_record_visit_buffers_points(self, mock_client):
        collector = MetricsCollector(namespace="Test")
        
        collector.record_visit(is_unique=True, latency_ms=12.5)
        
        names = [m.metric_name for m in collector.metric_buffer]
        assert names == [MetricType.UNIQUE_VISIT.value, MetricType.REQUEST_LATENCY.value]
        mock_client.return_value.put_metric_data.assert_not_called()
    
    def test_returning_visit_metric(self, mock_client):
        collector = MetricsCollector()
        
        collector.record_visit(is_unique=False)
        
        assert collector.metric_buffer[0].metric_name == MetricType.RETURNING_VISIT.value
    
    def test_flush_publishes_with_dimensions(self, mock_client):
        collector = MetricsCollector(namespace="Test")
        collector.record_geo_lookup("ip-api.com", success=False)
        
        collector.flush()
        
        kwargs = mock_client.return_value.put_metric_data.call_args[1]
        assert kwargs["Namespace"] == "Test"
        datum = kwargs["MetricData"][0]
        assert datum["MetricName"] == MetricType.GEO_LOOKUP.value
        assert {"Name": "outcome", "Value": "failure"} in datum["Dimensions"]
        assert collector.metric_buffer == []
    
    def test_full_batch_published_in_background(self, mock_client):
        publishing_threads = []
        mock_client.return_value.put_metric_data.side_effect = (
            lambda **kwargs: publishing_threads.append(threading.current_thread())
        )
        collector = MetricsCollector(batch_size=2)
        
        collector.record_sink_outcome("discord", True)
        collector.record_sink_outcome("telegram", False)
        collector.wait_for_publish()
        
        assert mock_client.return_value.put_metric_data.call_count == 1
        assert publishing_threads[0] is not threading.current_thread()
        assert publishing_threads[0].name == "MetricsPublisher"
        assert collector.metric_buffer == []
        collector.shutdown()
    
    def test_record_metric_never_publishes_on_caller_thread(self, mock_client):
        publishing_threads = []
        mock_client.return_value.put_metric_data.side_effect = (
            lambda **kwargs: publishing_threads.append(threading.current_thread())
        )
        collector = MetricsCollector(batch_size=1)
        
        for _ in range(5):
            collector.record_visit(is_unique=True)
        collector.wait_for_publish()
        
        assert mock_client.return_value.put_metric_data.call_count == 5
        assert threading.current_thread() not in publishing_threads
        collector.shutdown()
    
    def test_shutdown_publishes_remaining_points(self, mock_client):
        collector = MetricsCollector(batch_size=10)
        collector.record_visit(is_unique=False)
        
        collector.shutdown()
        
        assert mock_client.return_value.put_metric_data.call_count == 1
        assert collector.metric_buffer == []
    
    def test_full_queue_drops_batch(self, mock_client):
        release = threading.Event()
        mock_client.return_value.put_metric_data.side_effect = lambda **kwargs: release.wait(5)
        collector = MetricsCollector(batch_size=1, max_queue_size=1)
        
        for _ in range(4):
            collector.record_visit(is_unique=True)
        
        assert collector.batches_dropped >= 2
        release.set()
        collector.shutdown()
    
    def test_large_buffer_split_into_batches(self, mock_client):
        collector = MetricsCollector(batch_size=100)
        for _ in range(45):
            collector.record_metric(MetricPoint(metric_name="m", value=1.0))
        
        collector.flush()
        
        assert mock_client.return_value.put_metric_data.call_count == 3
    
    def test_publish_failure_is_logged_not_raised(self, mock_client):
        mock_client.return_value.put_metric_data.side_effect = ClientError(
            {"Error": {"Code": "Throttling", "Message": "slow down"}}, "PutMetricData"
        )
        collector = MetricsCollector()
        collector.record_visit(is_unique=True)
        
        collector.flush()
        
        assert collector.metric_buffer == []
    
    def test_empty_flush_is_noop(self, mock_client):
        MetricsCollector().flush()
        
        mock_client.return_value.put_metric_data.assert_not_called()


class TestMetricPoint:
    
    def test_timestamp_defaults_to_now(self):
        point = MetricPoint(metric_name="m", value=1.0)
        
        assert point.timestamp is not None
        assert point.timestamp.tzinfo is not None
