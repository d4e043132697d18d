"""DynamoDB backend for the document store."""
import logging
from decimal import Decimal
from typing import Any, Optional

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from app.db.store import DocumentTable, ItemExists, ItemNotFound, ScanFilter, VersionConflict


logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def to_dynamo(value: Any) -> Any:
    """Convert Python values to types boto3 accepts (floats become Decimal)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Convert boto3 values back to plain JSON-friendly Python types."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    if isinstance(value, set):
        return sorted(from_dynamo(v) for v in value)
    return value


def build_condition(filter: ScanFilter):
    """Translate a ScanFilter into a boto3 condition expression (or None)."""
    condition = None
    for name, value in filter.equals.items():
        clause = Attr(name).eq(to_dynamo(value))
        condition = clause if condition is None else condition & clause

    if filter.contains is not None and filter.contains_fields:
        any_clause = None
        for name in filter.contains_fields:
            clause = Attr(name).contains(filter.contains)
            any_clause = clause if any_clause is None else any_clause | clause
        condition = any_clause if condition is None else condition & any_clause
    return condition


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


class DynamoTable(DocumentTable):
    """Wraps a boto3 ``Table`` resource."""

    def __init__(self, table, hash_key: str):
        self.table = table
        self.hash_key = hash_key
        self.name = getattr(table, "name", hash_key)

    def get(self, key: str) -> Optional[dict]:
        response = self.table.get_item(Key={self.hash_key: key})
        item = response.get("Item")
        return from_dynamo(item) if item is not None else None

    def put(self, item: dict, *, if_absent: bool = False, expected_version: Optional[int] = None) -> None:
        kwargs = {"Item": to_dynamo(item)}
        if if_absent:
            kwargs["ConditionExpression"] = Attr(self.hash_key).not_exists()
        elif expected_version is not None:
            condition = Attr("version").eq(expected_version)
            if expected_version == 0:
                condition = Attr(self.hash_key).not_exists() | Attr("version").not_exists() | condition
            kwargs["ConditionExpression"] = condition

        try:
            self.table.put_item(**kwargs)
        except ClientError as e:
            if not _is_conditional_failure(e):
                raise
            key = item[self.hash_key]
            if if_absent:
                raise ItemExists(f"{self.name}: {key} already exists") from e
            raise VersionConflict(f"{self.name}: {key} changed, expected version {expected_version}") from e

    def scan_page(self, limit=None, start_key=None, filter=None):
        kwargs = {}
        if limit is not None:
            kwargs["Limit"] = limit
        if start_key:
            kwargs["ExclusiveStartKey"] = start_key
        if filter is not None:
            condition = build_condition(filter)
            if condition is not None:
                kwargs["FilterExpression"] = condition

        response = self.table.scan(**kwargs)
        items = [from_dynamo(item) for item in response.get("Items", [])]
        last_key = response.get("LastEvaluatedKey")
        return items, from_dynamo(last_key) if last_key else None

    def update(self, key: str, fields: dict) -> dict:
        expressions = []
        names = {}
        values = {}
        for index, (name, value) in enumerate(fields.items()):
            expressions.append(f"#attr{index} = :val{index}")
            names[f"#attr{index}"] = name
            values[f":val{index}"] = to_dynamo(value)

        try:
            response = self.table.update_item(
                Key={self.hash_key: key},
                UpdateExpression="SET " + ", ".join(expressions),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ConditionExpression=Attr(self.hash_key).exists(),
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise ItemNotFound(f"{self.name}: {key} not found") from e
            raise
        return from_dynamo(response.get("Attributes", {}))

    def delete(self, key: str) -> bool:
        response = self.table.delete_item(Key={self.hash_key: key}, ReturnValues="ALL_OLD")
        return bool(response.get("Attributes"))
