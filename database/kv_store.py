"""String-keyed blob store on top of the SQLite pool."""

from __future__ import annotations

from typing import Optional

import aiosqlite

from core import get_logger
from core.exceptions import PersistenceFailure
from database.connection import OptimizedSQLitePool

logger = get_logger(__name__)


class KeyValueStore:
    """Persist opaque string values under string keys.

    A missing key is not an error: ``get`` returns ``None``. Anything the
    driver or the filesystem raises is re-raised as PersistenceFailure.
    """

    def __init__(self, pool: OptimizedSQLitePool) -> None:
        self.pool = pool

    async def get(self, key: str) -> Optional[str]:
        """Fetch the value stored under key.

        Args:
            key: Storage key

        Returns:
            Stored string or None if the key is absent

        Raises:
            PersistenceFailure: If the store cannot be read
        """
        try:
            async with self.pool.connection() as conn:
                cursor = await conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?",
                    (key,)
                )
                row = await cursor.fetchone()
                await cursor.close()
        except (aiosqlite.Error, OSError) as e:
            raise PersistenceFailure(f"Failed to read key {key!r}: {e}") from e

        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value.

        Raises:
            PersistenceFailure: If the store cannot be written
        """
        try:
            async with self.pool.connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET
                        value=excluded.value,
                        updated_at=datetime('now')
                    """,
                    (key, value)
                )
                await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            raise PersistenceFailure(f"Failed to write key {key!r}: {e}") from e

        logger.debug(f"Stored {len(value)} chars under {key}")

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        try:
            async with self.pool.connection() as conn:
                await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            raise PersistenceFailure(f"Failed to delete key {key!r}: {e}") from e
