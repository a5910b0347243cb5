"""Database initialization and migrations."""

import logging
from pathlib import Path
from typing import Optional

import aiosqlite

import config
from database.models import CREATE_KV_STORE_TABLE, CREATE_INDEXES

logger = logging.getLogger(__name__)


async def initialize_database(db_path: Optional[str] = None):
    """Create the key-value table and its indexes."""
    db_path = db_path or config.DATABASE_PATH

    # Create data directory if it doesn't exist
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        await db.execute(CREATE_KV_STORE_TABLE)

        for index_sql in CREATE_INDEXES:
            await db.execute(index_sql)

        await db.commit()
    logger.info("Database initialized at %s", db_path)
