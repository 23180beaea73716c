"""
Local storage - named keys holding JSON strings.

Mirrors the browser localStorage contract (get_item / set_item / remove_item
of plain strings) on top of the SQLite ``local_storage`` table, plus JSON
helpers used by the record stores, the enrichment cache and the access gate.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from historian.errors import StorageCorruption
from historian.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter

logger = get_logger(__name__)


class LocalStorage:
    """String-keyed persistent store. Every write commits immediately."""

    table_name = "local_storage"

    @contextmanager
    def _get_conn(self) -> Generator[sqlite3.Connection, None, None]:
        with get_db_connection() as conn:
            yield conn

    def get_item(self, key: str) -> str | None:
        """Return the raw string stored under key, or None if never written."""
        with self._get_conn() as conn:
            row = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?",
                (key,),
            ).fetchone()
        return row["value"] if row else None

    @retry_on_db_lock()
    def set_item(self, key: str, value: str) -> None:
        """
        Store value under key, replacing any previous value.

        Side Effects:
            - Upserts a row in local_storage and commits
        """
        with db_transaction() as conn:
            conn.execute(
                """
                INSERT INTO local_storage (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )

    @retry_on_db_lock()
    def remove_item(self, key: str) -> None:
        """Delete key. No-op if absent."""
        with db_transaction() as conn:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))

    def read_json(self, key: str) -> Any | None:
        """
        Decode the JSON value under key.

        Returns:
            The decoded value, or None if the key was never written

        Raises:
            StorageCorruption: If the stored text is not valid JSON
        """
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            counter("storage.corruption")
            raise StorageCorruption(key, str(e)) from e

    def write_json(self, key: str, value: Any) -> None:
        """Encode value as JSON and store it under key."""
        self.set_item(key, json.dumps(value, ensure_ascii=False))


__all__ = ["LocalStorage", "StorageCorruption"]
