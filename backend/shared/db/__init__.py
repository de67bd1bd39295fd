"""SQLite database layer: connection management and key-value store implementation."""

from shared.db.connection import Database
from shared.db.kv_store import SqliteKeyValueStore

__all__ = [
    "Database",
    "SqliteKeyValueStore",
]
