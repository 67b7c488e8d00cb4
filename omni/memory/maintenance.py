"""
Operator-side memory maintenance. Never called by store() or recall().

memory_stats      counts per category / owner agent, age range
purge_older_than  explicit age-based retention
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, select

from ..core.database import Database
from ..models.memory import MemoryRecord
from .errors import ValidationError

logger = logging.getLogger(__name__)


def _iso(value):
    return value.isoformat() if value is not None else None


async def memory_stats(database: Database) -> dict:
    async with database.session() as session:
        total, oldest, newest = (
            await session.execute(
                select(
                    func.count(MemoryRecord.id),
                    func.min(MemoryRecord.created_at),
                    func.max(MemoryRecord.created_at),
                )
            )
        ).one()

        by_category = (
            await session.execute(
                select(MemoryRecord.category, func.count(MemoryRecord.id))
                .group_by(MemoryRecord.category)
            )
        ).all()

        by_agent = (
            await session.execute(
                select(MemoryRecord.owner_agent, func.count(MemoryRecord.id))
                .group_by(MemoryRecord.owner_agent)
            )
        ).all()

    return {
        "total": total or 0,
        "by_category": {category: count for category, count in by_category},
        "by_owner_agent": {agent or "unknown": count for agent, count in by_agent},
        "oldest": _iso(oldest),
        "newest": _iso(newest),
    }


def purge_cutoff(days: int) -> datetime:
    if isinstance(days, bool) or not isinstance(days, int) or days < 1:
        raise ValidationError(f"days must be a positive integer, got {days!r}")
    return datetime.now(timezone.utc) - timedelta(days=days)


async def count_older_than(database: Database, days: int) -> int:
    cutoff = purge_cutoff(days)
    async with database.session() as session:
        result = await session.execute(
            select(func.count(MemoryRecord.id)).where(MemoryRecord.created_at < cutoff)
        )
        return result.scalar_one()


async def purge_older_than(database: Database, days: int) -> int:
    """Delete memories created more than `days` days ago. Returns rows deleted."""
    cutoff = purge_cutoff(days)
    async with database.session() as session:
        result = await session.execute(
            delete(MemoryRecord).where(MemoryRecord.created_at < cutoff)
        )
        deleted = result.rowcount or 0
    logger.info("Purged %d memories older than %d days (before %s)", deleted, days, cutoff.isoformat())
    return deleted
