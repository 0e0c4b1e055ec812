"""DynamoDB Visit Store for multi-instance deployments.

One item per identity. The dedup check-and-update is a single
conditional UpdateItem, so concurrent instances never classify the same
identity unique twice inside one window. Expiry uses DynamoDB TTL on
``ttl_timestamp``.
"""

import logging, os
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from visitor_tracker.common.constants import TrackingConstants
from visitor_tracker.common.exceptions import VisitStoreError
from visitor_tracker.data.schemas.visit import VisitClassification
from visitor_tracker.tracking.store import VisitRecord, VisitStore, VisitStoreStats

logger = logging.getLogger(__name__)


def _to_decimal(moment: datetime) -> Decimal:
    return Decimal(str(moment.timestamp()))


def _from_decimal(value: Any) -> datetime:
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


class DynamoDBVisitStore(VisitStore):
    """DynamoDB-backed visit store keyed by ``pk = VISITOR#<identity>``."""
    
    DEFAULT_REGION = "us-east-1"
    MAX_ATTEMPTS = 2
    
    def __init__(
        self,
        table_name: Optional[str] = None,
        region: Optional[str] = None,
        aws_profile: Optional[str] = None,
        retention: timedelta = timedelta(seconds=TrackingConstants.DEFAULT_RETENTION_SECONDS),
    ):
        self.table_name = table_name or os.environ.get("TRACKER_DYNAMODB_TABLE")
        if not self.table_name:
            raise ValueError("TRACKER_DYNAMODB_TABLE required")
        
        self.region = region or os.environ.get("AWS_DEFAULT_REGION", self.DEFAULT_REGION)
        self.retention = retention
        
        if aws_profile:
            session = boto3.Session(profile_name=aws_profile)
            self.dynamodb = session.resource("dynamodb", region_name=self.region)
        else:
            self.dynamodb = boto3.resource("dynamodb", region_name=self.region)
        
        self.table = self.dynamodb.Table(self.table_name)
        logger.info(f"DynamoDB visit store initialized: {self.table_name} ({self.region})")
    
    @staticmethod
    def _key(identity: str) -> Dict[str, str]:
        return {"pk": f"{TrackingConstants.DYNAMODB_KEY_PREFIX}{identity}"}
    
    @staticmethod
    def _record_from_item(item: Dict[str, Any]) -> VisitRecord:
        return VisitRecord(
            first_visit_at=_from_decimal(item["first_visit_at"]),
            last_visit_at=_from_decimal(item["last_visit_at"]),
            visit_count=int(item["visit_count"]),
        )
    
    def record_visit(
        self, identity: str, now: datetime, window: timedelta
    ) -> VisitClassification:
        for _ in range(self.MAX_ATTEMPTS):
            try:
                response = self.table.update_item(
                    Key=self._key(identity),
                    UpdateExpression=(
                        "SET first_visit_at = if_not_exists(first_visit_at, :now), "
                        "last_visit_at = :now, ttl_timestamp = :ttl "
                        "ADD visit_count :one"
                    ),
                    ConditionExpression="attribute_not_exists(pk) OR last_visit_at < :cutoff",
                    ExpressionAttributeValues={
                        ":now": _to_decimal(now),
                        ":cutoff": _to_decimal(now - window),
                        ":ttl": int((now + self.retention).timestamp()),
                        ":one": 1,
                    },
                    ReturnValues="ALL_NEW",
                )
                return self._record_from_item(response["Attributes"]).to_classification(
                    is_unique=True
                )
            except ClientError as e:
                if e.response["Error"]["Code"] != "ConditionalCheckFailedException":
                    logger.error(f"record_visit failed: {e}")
                    raise VisitStoreError(
                        "Failed to update visit record", details={"table": self.table_name}
                    ) from e
            
            record = self.get(identity)
            if record is not None:
                return record.to_classification(is_unique=False)
            # Item expired between the conditional write and the read.
            logger.debug("Visit record vanished after conditional check, retrying")
        
        raise VisitStoreError(
            "Visit record changed concurrently", details={"table": self.table_name}
        )
    
    def get(self, identity: str) -> Optional[VisitRecord]:
        try:
            response = self.table.get_item(Key=self._key(identity), ConsistentRead=True)
        except ClientError as e:
            logger.error(f"get failed: {e}")
            raise VisitStoreError(
                "Failed to read visit record", details={"table": self.table_name}
            ) from e
        
        if item := response.get("Item"):
            return self._record_from_item(item)
        return None
    
    def stats(self) -> VisitStoreStats:
        stats = VisitStoreStats()
        scan_kwargs: Dict[str, Any] = {"ProjectionExpression": "visit_count"}
        try:
            while True:
                response = self.table.scan(**scan_kwargs)
                for item in response.get("Items", []):
                    count = int(item.get("visit_count", 0))
                    stats.identities += 1
                    stats.total_visits += count
                    if count > 1:
                        stats.returning += 1
                if "LastEvaluatedKey" not in response:
                    break
                scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
        except ClientError as e:
            logger.error(f"stats scan failed: {e}")
            raise VisitStoreError(
                "Failed to scan visit records", details={"table": self.table_name}
            ) from e
        return stats
    
    def clear(self) -> None:
        scan_kwargs: Dict[str, Any] = {"ProjectionExpression": "pk"}
        with self.table.batch_writer() as batch:
            while True:
                response = self.table.scan(**scan_kwargs)
                for item in response.get("Items", []):
                    batch.delete_item(Key={"pk": item["pk"]})
                if "LastEvaluatedKey" not in response:
                    break
                scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
