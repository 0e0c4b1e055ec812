"""Unit tests for the DynamoDB visit store."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from visitor_tracker.common.exceptions import VisitStoreError
from visitor_tracker.tracking.dynamodb_store import DynamoDBVisitStore

T0 = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
WINDOW = timedelta(minutes=30)


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "UpdateItem")


def _item(first: datetime, last: datetime, count: int) -> dict:
    return {
        "pk": "VISITOR#id-1",
        "first_visit_at": Decimal(str(first.timestamp())),
        "last_visit_at": Decimal(str(last.timestamp())),
        "visit_count": Decimal(count),
    }


class TestDynamoDBVisitStore:
    """Test the conditional-write visit store."""
    
    @pytest.fixture
    def mock_table(self):
        """Create mock DynamoDB table."""
        return MagicMock()
    
    @pytest.fixture
    def store(self, mock_table):
        """Create visit store with mocked table."""
        with patch("boto3.resource") as mock_resource:
            mock_resource.return_value.Table.return_value = mock_table
            return DynamoDBVisitStore(table_name="test-visits", region="us-east-1")
    
    def test_requires_table_name(self, monkeypatch):
        monkeypatch.delenv("TRACKER_DYNAMODB_TABLE", raising=False)
        with patch("boto3.resource"):
            with pytest.raises(ValueError):
                DynamoDBVisitStore()
    
    def test_unique_visit_on_successful_conditional_write(self, store, mock_table):
        mock_table.update_item.return_value = {"Attributes": _item(T0, T0, 1)}
        
        result = store.record_visit("id-1", T0, WINDOW)
        
        assert result.is_unique is True
        assert result.visit_count == 1
        assert result.first_visit == T0
        
        kwargs = mock_table.update_item.call_args[1]
        assert kwargs["Key"] == {"pk": "VISITOR#id-1"}
        assert "attribute_not_exists(pk)" in kwargs["ConditionExpression"]
        values = kwargs["ExpressionAttributeValues"]
        assert values[":cutoff"] == Decimal(str((T0 - WINDOW).timestamp()))
        assert values[":ttl"] == int((T0 + timedelta(days=1)).timestamp())
    
    def test_condition_failure_is_returning_visit(self, store, mock_table):
        """A failed condition means the last unique visit is inside the window."""
        mock_table.update_item.side_effect = _client_error("ConditionalCheckFailedException")
        mock_table.get_item.return_value = {"Item": _item(T0, T0, 3)}
        
        result = store.record_visit("id-1", T0 + timedelta(minutes=5), WINDOW)
        
        assert result.is_unique is False
        assert result.visit_count == 3
        assert mock_table.get_item.call_args[1]["ConsistentRead"] is True
    
    def test_vanished_record_retries_then_raises(self, store, mock_table):
        mock_table.update_item.side_effect = _client_error("ConditionalCheckFailedException")
        mock_table.get_item.return_value = {}
        
        with pytest.raises(VisitStoreError):
            store.record_visit("id-1", T0, WINDOW)
        
        assert mock_table.update_item.call_count == DynamoDBVisitStore.MAX_ATTEMPTS
    
    def test_other_client_errors_raise_store_error(self, store, mock_table):
        mock_table.update_item.side_effect = _client_error("ProvisionedThroughputExceededException")
        
        with pytest.raises(VisitStoreError):
            store.record_visit("id-1", T0, WINDOW)
    
    def test_get_missing_returns_none(self, store, mock_table):
        mock_table.get_item.return_value = {}
        
        assert store.get("id-1") is None
    
    def test_stats_paginates(self, store, mock_table):
        mock_table.scan.side_effect = [
            {"Items": [{"visit_count": Decimal(1)}, {"visit_count": Decimal(3)}],
             "LastEvaluatedKey": {"pk": "VISITOR#x"}},
            {"Items": [{"visit_count": Decimal(2)}]},
        ]
        
        stats = store.stats()
        
        assert stats.identities == 3
        assert stats.returning == 2
        assert stats.total_visits == 6
        assert mock_table.scan.call_args_list[1][1]["ExclusiveStartKey"] == {"pk": "VISITOR#x"}
