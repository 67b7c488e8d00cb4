"""
Create the schema: pgvector extension, tables, indexes (incl. the ivfflat
cosine index on semantic_memories.embedding).

Usage: python scripts/init_db.py [--database-url URL]
"""

import argparse
import asyncio
import logging

from omni.core.config import get_settings
from omni.core.database import Database
from omni.factory import configure_logging

logger = logging.getLogger("init_db")


async def run(database_url: str) -> None:
    database = Database(database_url)
    try:
        await database.init_schema()
    finally:
        await database.dispose()


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Create Omni database tables and indexes")
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args()

    configure_logging(settings.log_level)
    asyncio.run(run(args.database_url))
    logger.info("Schema ready")


if __name__ == "__main__":
    main()
