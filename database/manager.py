"""Raw key-value storage operations."""

import logging
from datetime import datetime
from typing import Optional

import aiosqlite

import config

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Opaque get/set store keyed by (owner, key).

    Knows nothing about what the values mean; errors propagate to the caller.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.DATABASE_PATH

    def _connect(self) -> aiosqlite.Connection:
        """Get database connection."""
        return aiosqlite.connect(self.db_path)

    async def get(self, owner_id: str, key: str) -> Optional[str]:
        """Read one raw value, or None if it was never written."""
        async with self._connect() as db:
            async with db.execute(
                "SELECT value FROM kv_store WHERE owner_id = ? AND key = ?",
                (owner_id, key)
            ) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else None

    async def set(self, owner_id: str, key: str, value: str):
        """Replace one raw value in a single commit."""
        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO kv_store (owner_id, key, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(owner_id, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (owner_id, key, value, datetime.now().isoformat())
            )
            await db.commit()


# Global database manager instance
db_manager = DatabaseManager()
