"""SQLite connection pool backing the local key-value store."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiosqlite

from core.constants import DatabaseDefaults


class OptimizedSQLitePool:
    """Small fixed-size aiosqlite pool.

    Connections are handed out through a queue, so a caller waiting for a
    free connection never blocks the one returning it.
    """

    def __init__(self, database_path: str, pool_size: int = DatabaseDefaults.POOL_SIZE,
                 busy_timeout_ms: int = DatabaseDefaults.BUSY_TIMEOUT) -> None:
        self.database_path = Path(database_path)
        self.pool_size = max(1, pool_size)
        self.busy_timeout_ms = busy_timeout_ms
        self._connections: List[aiosqlite.Connection] = []
        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init_pool(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return

            if not self.database_path.parent.exists():
                self.database_path.parent.mkdir(parents=True, exist_ok=True)

            for _ in range(self.pool_size):
                conn = await aiosqlite.connect(self.database_path.as_posix())
                await self._apply_pragma(conn)
                self._connections.append(conn)
                self._idle.put_nowait(conn)

            self._initialized = True

    async def close(self) -> None:
        self._initialized = False
        while not self._idle.empty():
            self._idle.get_nowait()
        while self._connections:
            conn = self._connections.pop()
            await conn.close()

    async def _apply_pragma(self, conn: aiosqlite.Connection) -> None:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute("PRAGMA temp_store=MEMORY")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout_ms}")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        if not self._initialized:
            await self.init_pool()
        conn = await self._idle.get()
        try:
            yield conn
        finally:
            # A connection closed by close() while checked out is dropped
            if conn in self._connections:
                self._idle.put_nowait(conn)


_db_pool: Optional[OptimizedSQLitePool] = None


async def init_db_pool(database_path: str, pool_size: int, busy_timeout_ms: int) -> OptimizedSQLitePool:
    global _db_pool
    pool = OptimizedSQLitePool(database_path=database_path, pool_size=pool_size, busy_timeout_ms=busy_timeout_ms)
    await pool.init_pool()
    _db_pool = pool
    return pool


async def close_db_pool() -> None:
    global _db_pool
    if _db_pool is not None:
        await _db_pool.close()
        _db_pool = None
