"""
Age-based retention for semantic memories. Run from cron, never from the service.

Usage: python scripts/purge_memories.py --older-than-days 90 [--dry-run]
"""

import argparse
import asyncio
import logging
import sys

from omni.core.config import get_settings
from omni.core.database import Database
from omni.factory import configure_logging
from omni.memory.errors import ValidationError
from omni.memory.maintenance import count_older_than, purge_older_than

logger = logging.getLogger("purge_memories")


async def run(database_url: str, days: int, dry_run: bool) -> int:
    database = Database(database_url)
    try:
        if dry_run:
            count = await count_older_than(database, days)
            logger.info("Dry run: %d memories older than %d days would be deleted", count, days)
            return count
        return await purge_older_than(database, days)
    finally:
        await database.dispose()


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Delete semantic memories older than N days")
    parser.add_argument("--older-than-days", type=int, required=True)
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args()

    configure_logging(settings.log_level)
    try:
        asyncio.run(run(args.database_url, args.older_than_days, args.dry_run))
    except ValidationError as e:
        logger.error("%s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
