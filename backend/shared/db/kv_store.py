"""SQLite-backed key-value store."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteKeyValueStore:
    """SQLite implementation of the KeyValueStore protocol.

    One row per logical key in the kv_store table. Writes are upserts
    serialized by an asyncio.Lock.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def get_item(self, key: str) -> str | None:
        row = self._db.connection.execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,),
        ).fetchone()
        if row is None:
            return None
        return row[0]

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            self._db.connection.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET "
                "value = excluded.value, "
                "updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')",
                (key, value),
            )
            self._db.connection.commit()

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            cursor = self._db.connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self._db.connection.commit()
            if cursor.rowcount:
                logger.debug("removed record", key=key)
