"""
Utility wrapper for storing OAuth token documents and users in DynamoDB.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.conditions import Attr

from app.core.config import StorageSettings


class DynamoDBClient:
    """Document operations mirroring ``SQLiteStore`` against a (pk, sk) table."""

    def __init__(self, settings: StorageSettings, table: Any = None) -> None:
        if table is None:
            if not settings.dynamodb_table_name:
                raise ValueError("DYNAMODB_TABLE_NAME must be set for the dynamodb backend.")
            resource = boto3.resource("dynamodb", region_name=settings.region_name)
            table = resource.Table(settings.dynamodb_table_name)
        self._settings = settings
        self._table = table

    def put_item(self, item: Dict[str, Any]) -> None:
        """Put an item in the DynamoDB table, replacing any previous version."""
        # None attributes are omitted so `exists()` filters see them as absent.
        self._table.put_item(Item={k: v for k, v in item.items() if v is not None})

    def get_item(self, *, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]:
        """Retrieve an item using its key."""
        response = self._table.get_item(Key={"pk": partition_key, "sk": sort_key})
        return response.get("Item")

    def delete_item(self, *, partition_key: str, sort_key: str) -> None:
        self._table.delete_item(Key={"pk": partition_key, "sk": sort_key})

    def scan_expiring(
        self,
        *,
        sort_key_prefix: str,
        expires_field: str,
        cutoff: str,
        required_field: str,
    ) -> list[Dict[str, Any]]:
        """Scan for documents expiring at or before ``cutoff``, following pagination."""
        filter_expression = (
            Attr("sk").begins_with(sort_key_prefix)
            & Attr(expires_field).lte(cutoff)
            & Attr(required_field).exists()
        )
        items: list[Dict[str, Any]] = []
        kwargs: Dict[str, Any] = {"FilterExpression": filter_expression}
        while True:
            response = self._table.scan(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return sorted(items, key=lambda item: item.get(expires_field, ""))


__all__ = ["DynamoDBClient"]
