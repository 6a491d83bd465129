"""
DynamoDB access for the booking API.

Wraps boto3 Table resources so that repositories only ever see two kinds of
failure: ConditionFailed (a conditional write was rejected) and StoreError
(anything else the store or the AWS client raised).
"""

import logging
from contextlib import contextmanager
from typing import Any, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings
from .errors import ConditionFailed, StoreError

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def get_dynamodb_resource(settings: Settings):
    """Get configured boto3 DynamoDB resource"""
    return boto3.resource(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url,
        # Retry policy belongs to the caller; one attempt per request
        config=Config(retries={"max_attempts": 1, "mode": "standard"}),
    )


@contextmanager
def classify_store_errors(operation: str, table_name: str):
    try:
        yield
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        if code == CONDITIONAL_CHECK_FAILED:
            logger.info(f"🔒 Conditional {operation} rejected on {table_name}")
            raise ConditionFailed(f"{operation} condition failed on {table_name}") from e
        logger.error(f"❌ DynamoDB {operation} failed on {table_name}: {code} {e}")
        raise StoreError(f"{operation} failed on {table_name}: {code}") from e
    except BotoCoreError as e:
        logger.error(f"❌ DynamoDB {operation} failed on {table_name}: {e}")
        raise StoreError(f"{operation} failed on {table_name}") from e


class DynamoTable:
    """Thin wrapper around a boto3 Table with store error classification"""

    def __init__(self, table):
        self.table = table
        self.name = getattr(table, "name", "unknown")

    @classmethod
    def from_settings(cls, settings: Settings, table_name: str, resource=None) -> "DynamoTable":
        resource = resource or get_dynamodb_resource(settings)
        return cls(resource.Table(table_name))

    def get(self, key: dict) -> Optional[dict]:
        """Point lookup; returns None when no item has this key"""
        with classify_store_errors("GetItem", self.name):
            response = self.table.get_item(Key=key)
        return response.get("Item")

    def put(self, item: dict, condition: Optional[str] = None) -> None:
        kwargs: dict[str, Any] = {"Item": item}
        if condition:
            kwargs["ConditionExpression"] = condition
        with classify_store_errors("PutItem", self.name):
            self.table.put_item(**kwargs)

    def update(
        self,
        key: dict,
        update_expression: str,
        names: Optional[dict] = None,
        values: Optional[dict] = None,
        condition: Optional[str] = None,
    ) -> dict:
        """Apply an update expression and return the item as it is afterwards"""
        kwargs: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": update_expression,
            "ReturnValues": "ALL_NEW",
        }
        if names:
            kwargs["ExpressionAttributeNames"] = names
        if values:
            kwargs["ExpressionAttributeValues"] = values
        if condition:
            kwargs["ConditionExpression"] = condition
        with classify_store_errors("UpdateItem", self.name):
            response = self.table.update_item(**kwargs)
        return response.get("Attributes", {})

    def query(self, **kwargs) -> list[dict]:
        """Run a query and follow LastEvaluatedKey until every page is read"""
        items: list[dict] = []
        with classify_store_errors("Query", self.name):
            while True:
                response = self.table.query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        return items

    def scan(self, **kwargs) -> list[dict]:
        """Full-table scan, following LastEvaluatedKey like query()"""
        items: list[dict] = []
        with classify_store_errors("Scan", self.name):
            while True:
                response = self.table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        return items
