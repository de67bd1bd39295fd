"""Key-value storage abstraction for ledger persistence.

The persistence gateway stores a handful of JSON records under fixed logical
keys. Any backend that can get/set/remove a string by key satisfies the
KeyValueStore protocol. Backends raise OSError (or sqlite3.Error) on I/O
failure; classifying those failures is the gateway's job.

Files are written with owner-only permissions (0o600) inside an owner-only
directory (0o700) as a filesystem hygiene measure.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote

import structlog

if TYPE_CHECKING:
    from shared.settings import StorageSettings

logger = structlog.get_logger()

# Owner-only directory permissions for the data directory.
_DATA_DIR_MODE = 0o700

# Owner-only file permissions for record files.
_DATA_FILE_MODE = 0o600


class KeyValueStore(Protocol):
    """Protocol for a durable string key-value store."""

    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileKeyValueStore:
    """Stores each key as a UTF-8 file under a data directory.

    Keys are percent-encoded into file names. Writes go through a temp file
    and an atomic rename so readers never see a partial record. Blocking
    file I/O runs in a worker thread via asyncio.to_thread. An asyncio.Lock
    serializes mutations within a single process; multiple processes sharing
    a directory are not supported.

    Bytes that are not valid UTF-8 are returned as surrogate escapes rather
    than raising, so a damaged record reaches the caller as unparseable text.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir).resolve()
        self._lock = asyncio.Lock()

    def _path_for(self, key: str) -> Path:
        target = (self._data_dir / f"{quote(key, safe='')}.json").resolve()
        if not target.is_relative_to(self._data_dir) or target.parent != self._data_dir:
            raise ValueError(f"Path traversal rejected: '{key}' resolves outside data directory")
        return target

    async def get_item(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, self._path_for(key))

    async def set_item(self, key: str, value: str) -> None:
        """Atomically write value, creating the data directory lazily on first write."""
        target = self._path_for(key)
        async with self._lock:
            await asyncio.to_thread(self._write, target, value)
        logger.debug("stored record", key=key, path=str(target))

    async def remove_item(self, key: str) -> None:
        target = self._path_for(key)
        async with self._lock:
            await asyncio.to_thread(target.unlink, missing_ok=True)

    @staticmethod
    def _read(path: Path) -> str | None:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8", errors="surrogateescape")

    def _write(self, target: Path, value: str) -> None:
        self._data_dir.mkdir(mode=_DATA_DIR_MODE, parents=True, exist_ok=True)
        self._data_dir.chmod(_DATA_DIR_MODE)

        fd, tmp_path = tempfile.mkstemp(dir=str(self._data_dir), suffix=".tmp", prefix=".record_")
        fd_owned = True
        try:
            with os.fdopen(fd, "wb") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(value.encode("utf-8", errors="surrogateescape"))
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _DATA_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(target)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise


def create_store(settings: StorageSettings) -> KeyValueStore:
    """Build the key-value store selected by settings.backend."""
    if settings.backend == "file":
        return FileKeyValueStore(settings.data_dir)
    if settings.backend == "sqlite":
        from shared.db import Database, SqliteKeyValueStore  # noqa: PLC0415

        db = Database(settings.database_path)
        db.connect()
        return SqliteKeyValueStore(db)
    return MemoryKeyValueStore()
