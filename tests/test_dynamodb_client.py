from __future__ import annotations

from typing import Any, Dict, List

import pytest

from app.clients.dynamodb import DynamoDBClient
from app.core.config import StorageSettings


class _FakeTable:
    """Records calls and serves scan pages in order."""

    def __init__(self, pages: List[Dict[str, Any]] | None = None) -> None:
        self.items: Dict[tuple, Dict[str, Any]] = {}
        self.pages = list(pages or [])
        self.scan_calls: List[Dict[str, Any]] = []

    def put_item(self, Item: Dict[str, Any]) -> None:
        self.items[(Item["pk"], Item["sk"])] = Item

    def get_item(self, Key: Dict[str, str]) -> Dict[str, Any]:
        item = self.items.get((Key["pk"], Key["sk"]))
        return {"Item": item} if item else {}

    def delete_item(self, Key: Dict[str, str]) -> None:
        self.items.pop((Key["pk"], Key["sk"]), None)

    def scan(self, **kwargs: Any) -> Dict[str, Any]:
        self.scan_calls.append(kwargs)
        return self.pages.pop(0)


def _client(table: _FakeTable) -> DynamoDBClient:
    return DynamoDBClient(StorageSettings(TOKEN_STORE_BACKEND="dynamodb"), table=table)


def test_put_item_omits_none_attributes() -> None:
    table = _FakeTable()
    client = _client(table)

    client.put_item({"pk": "user#u", "sk": "oauth#linkedin", "refresh_token_encrypted": None})

    stored = client.get_item(partition_key="user#u", sort_key="oauth#linkedin")
    assert stored == {"pk": "user#u", "sk": "oauth#linkedin"}


def test_get_and_delete_missing_items() -> None:
    client = _client(_FakeTable())

    assert client.get_item(partition_key="user#x", sort_key="profile") is None
    client.delete_item(partition_key="user#x", sort_key="profile")


def test_scan_expiring_follows_pagination_and_sorts() -> None:
    table = _FakeTable(
        pages=[
            {
                "Items": [{"pk": "user#b", "access_expires_at": "2030-01-02T00:00:00+00:00"}],
                "LastEvaluatedKey": {"pk": "user#b", "sk": "oauth#linkedin"},
            },
            {"Items": [{"pk": "user#a", "access_expires_at": "2030-01-01T00:00:00+00:00"}]},
        ]
    )
    client = _client(table)

    items = client.scan_expiring(
        sort_key_prefix="oauth#",
        expires_field="access_expires_at",
        cutoff="2030-02-01T00:00:00+00:00",
        required_field="refresh_token_encrypted",
    )

    assert [item["pk"] for item in items] == ["user#a", "user#b"]
    assert len(table.scan_calls) == 2
    assert "ExclusiveStartKey" not in table.scan_calls[0]
    assert table.scan_calls[1]["ExclusiveStartKey"] == {"pk": "user#b", "sk": "oauth#linkedin"}


def test_table_name_required_without_injected_table() -> None:
    with pytest.raises(ValueError):
        DynamoDBClient(StorageSettings(TOKEN_STORE_BACKEND="dynamodb"))
