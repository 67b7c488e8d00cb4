"""Memory stats and age-based purge."""

from datetime import datetime, timedelta, timezone

import pytest

from omni.memory.errors import ValidationError
from omni.memory.maintenance import count_older_than, memory_stats, purge_older_than
from omni.models.memory import MemoryRecord

from conftest import vec


async def _insert(database, content, days_old, **fields):
    created = datetime.now(timezone.utc) - timedelta(days=days_old)
    async with database.session() as session:
        session.add(MemoryRecord(
            content=content,
            embedding=vec(1.0),
            metadata_={},
            tags=[],
            created_at=created,
            updated_at=created,
            **fields,
        ))


@pytest.mark.asyncio
async def test_stats_on_empty_store(database):
    assert await memory_stats(database) == {
        "total": 0, "by_category": {}, "by_owner_agent": {}, "oldest": None, "newest": None,
    }


@pytest.mark.asyncio
async def test_stats_counts(database):
    await _insert(database, "a", 10, category="research", owner_agent="research")
    await _insert(database, "b", 5, category="research", owner_agent="research")
    await _insert(database, "c", 1, category="email")

    stats = await memory_stats(database)
    assert stats["total"] == 3
    assert stats["by_category"] == {"research": 2, "email": 1}
    assert stats["by_owner_agent"] == {"research": 2, "unknown": 1}
    assert stats["oldest"] < stats["newest"]


@pytest.mark.asyncio
async def test_purge_removes_only_old_rows(database):
    await _insert(database, "ancient", 400)
    await _insert(database, "stale", 120)
    await _insert(database, "fresh", 2)

    assert await count_older_than(database, 90) == 2
    assert await purge_older_than(database, 90) == 2
    assert await count_older_than(database, 90) == 0

    stats = await memory_stats(database)
    assert stats["total"] == 1


@pytest.mark.asyncio
async def test_recall_after_purge(database, memory):
    await _insert(database, "stale fact", 200)
    await purge_older_than(database, 30)
    result = await memory.recall("stale fact", min_similarity=0.0)
    assert result.success is True
    assert result.results == []


@pytest.mark.parametrize("days", [0, -3, 1.5, True, "30"])
@pytest.mark.asyncio
async def test_purge_rejects_bad_days(database, days):
    with pytest.raises(ValidationError):
        await purge_older_than(database, days)
