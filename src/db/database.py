# key-value persistence port: sqlite-backed for the app, dict-backed for tests
import asyncio
import os.path
import sqlite3
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Mapping, Optional, Protocol

import aiosqlite

from db.errors import StorageReadError, StorageWriteError
from utils.logger import get_logger

_logger = get_logger(__name__)

INVENTORY_KEY = "pos_inventory"
TRANSACTIONS_KEY = "pos_transactions"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class KeyValueStore(Protocol):
    async def load(self, key: str) -> Optional[str]: ...

    async def save(self, key: str, value: str) -> None: ...

    async def save_many(self, items: Mapping[str, str]) -> None:
        """Write every item or none of them."""
        ...


class SqliteKeyValueStore:
    """
    Key-value entries stored as rows of a single ``kv`` table.

    The table is created on first use; every write commits or rolls back
    as one unit.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)

        if not self._initialized:
            async with self._init_lock:
                if not self._initialized:
                    _logger.info(f"Initializing key-value store at {self.db_path}...")
                    await conn.executescript(_SCHEMA)
                    await conn.commit()
                    self._initialized = True
        try:
            yield conn
        finally:
            await conn.close()

    async def load(self, key: str) -> Optional[str]:
        try:
            async with self.connect() as conn:
                cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
                row = await cur.fetchone()
                await cur.close()
        except sqlite3.Error as e:
            raise StorageReadError(str(e)) from e
        return row[0] if row else None

    async def save(self, key: str, value: str) -> None:
        await self.save_many({key: value})

    async def save_many(self, items: Mapping[str, str]) -> None:
        try:
            async with self.connect() as conn:
                try:
                    await conn.executemany(
                        """
                        INSERT INTO kv(key, value) VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                        """,
                        list(items.items()),
                    )
                    await conn.commit()
                except sqlite3.Error:
                    await conn.rollback()
                    raise
        except sqlite3.Error as e:
            _logger.error(f"Failed to persist {', '.join(items)}: {e}")
            raise StorageWriteError(str(e)) from e


class MemoryKeyValueStore:
    """Dict-backed store. ``fail_writes`` simulates a full quota."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.fail_writes = False

    async def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def save(self, key: str, value: str) -> None:
        await self.save_many({key: value})

    async def save_many(self, items: Mapping[str, str]) -> None:
        if self.fail_writes:
            _logger.error(f"Failed to persist {', '.join(items)}: quota exceeded")
            raise StorageWriteError("quota exceeded")
        self.data.update(items)
