"""SQLite-backed substitute for DynamoDB-style document storage."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional


class SQLiteStore:
    """JSON documents in a single table keyed by (pk, sk).

    ``put_item`` always replaces the whole document for its key, which is the
    only write path token records use.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    pk TEXT NOT NULL,
                    sk TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (pk, sk)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_documents_sk ON documents (sk)")

    def put_item(self, item: Dict[str, Any]) -> None:
        pk = item.get("pk")
        sk = item.get("sk")
        if not pk or not sk:
            raise ValueError("Item must include 'pk' and 'sk' keys")

        data_json = json.dumps(item)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO documents (pk, sk, data)
                VALUES (?, ?, ?)
                ON CONFLICT(pk, sk) DO UPDATE SET data = excluded.data
                """,
                (pk, sk, data_json),
            )

    def get_item(
        self, *, partition_key: str, sort_key: str
    ) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM documents WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def delete_item(self, *, partition_key: str, sort_key: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM documents WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            )

    def scan_expiring(
        self,
        *,
        sort_key_prefix: str,
        expires_field: str,
        cutoff: str,
        required_field: str,
    ) -> list[Dict[str, Any]]:
        """Documents under ``sort_key_prefix`` whose ``expires_field`` <= ``cutoff``.

        Timestamps are compared as ISO-8601 UTC strings. Documents lacking
        ``required_field`` (or holding null there) are skipped.
        """
        expires_path = f"$.{expires_field}"
        required_path = f"$.{required_field}"
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT data FROM documents
                WHERE sk LIKE ?
                  AND json_extract(data, ?) <= ?
                  AND json_extract(data, ?) IS NOT NULL
                ORDER BY json_extract(data, ?)
                """,
                (f"{sort_key_prefix}%", expires_path, cutoff, required_path, expires_path),
            ).fetchall()
        return [json.loads(row["data"]) for row in rows]


__all__ = ["SQLiteStore"]
