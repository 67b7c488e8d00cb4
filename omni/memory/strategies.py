"""
Recall strategies. Same contract, two ways of ranking.

StoreRankedStrategy  PostgreSQL ranks with pgvector `<=>` (cosine distance),
                     filters with WHERE and bounds cost with LIMIT.
ScanRankedStrategy   pulls the newest `window` rows matching the filters and
                     ranks them in-process with numpy. Anything older than the
                     window is not considered.

Both return (record, similarity) pairs best first, already thresholded and
truncated. Ties go to the newer record.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.memory import MemoryRecord
from . import similarity
from .config import STRATEGY_SCAN, STRATEGY_STORE
from .errors import StoreError

logger = logging.getLogger(__name__)

ANY = "all"


@dataclass
class RecallFilters:
    """Exact-match filters. None or "all" means no filter on that column."""

    category: Optional[str] = None
    priority: Optional[str] = None
    owner_agent: Optional[str] = None
    conversation_thread: Optional[str] = None

    def active(self) -> dict:
        return {
            name: value
            for name, value in (
                ("category", self.category),
                ("priority", self.priority),
                ("owner_agent", self.owner_agent),
                ("conversation_thread", self.conversation_thread),
            )
            if value is not None and value != ANY
        }

    def clauses(self) -> list:
        return [getattr(MemoryRecord, name) == value for name, value in self.active().items()]


@dataclass
class RankedCandidates:
    hits: list[tuple[MemoryRecord, float]] = field(default_factory=list)
    # Rows compared in-process; None when the store did the ranking.
    scanned: Optional[int] = None


class RecallStrategy(ABC):
    name: str = ""

    @abstractmethod
    async def search(
        self,
        session: AsyncSession,
        query_embedding: list[float],
        filters: RecallFilters,
        limit: int,
        min_similarity: float,
    ) -> RankedCandidates:
        ...


class StoreRankedStrategy(RecallStrategy):
    name = STRATEGY_STORE

    def statement(
        self,
        query_embedding: list[float],
        filters: RecallFilters,
        limit: int,
        min_similarity: float,
    ) -> Select:
        distance = MemoryRecord.embedding.cosine_distance(query_embedding)
        # <=> is NaN when either side has zero norm; score those 0 like the scan path.
        score = func.coalesce(func.nullif(1 - distance, float("nan")), 0.0)
        return (
            select(MemoryRecord, score.label("similarity"))
            .where(*filters.clauses())
            .where(score >= min_similarity)
            .order_by(distance, MemoryRecord.id.desc())
            .limit(limit)
        )

    async def search(self, session, query_embedding, filters, limit, min_similarity):
        dialect = session.get_bind().dialect.name
        if dialect != "postgresql":
            raise StoreError(
                f"store-ranked recall needs PostgreSQL with pgvector, not {dialect} "
                "(set FF_USE_VECTOR_INDEX=false to scan in-process)"
            )

        stmt = self.statement(query_embedding, filters, limit, min_similarity)
        hits = []
        for record, score in (await session.execute(stmt)).all():
            score = float(score) if score is not None else 0.0
            if not math.isfinite(score):
                score = 0.0
            if score >= min_similarity:
                hits.append((record, score))
        return RankedCandidates(hits=hits, scanned=None)


class ScanRankedStrategy(RecallStrategy):
    name = STRATEGY_SCAN

    def __init__(self, window: int = 1000):
        if window < 1:
            raise ValueError("scan window must be positive")
        self.window = window

    def statement(self, filters: RecallFilters) -> Select:
        return (
            select(MemoryRecord)
            .where(*filters.clauses())
            .order_by(MemoryRecord.created_at.desc(), MemoryRecord.id.desc())
            .limit(self.window)
        )

    async def search(self, session, query_embedding, filters, limit, min_similarity):
        records = list((await session.execute(self.statement(filters))).scalars().all())
        if len(records) == self.window:
            logger.info("Scan window full (%d rows), older memories not considered", self.window)

        by_id = {r.id: r for r in records}
        ranked = similarity.rank(
            query_embedding,
            [(r.id, r.embedding) for r in records],
            min_similarity=min_similarity,
            limit=limit,
        )
        return RankedCandidates(
            hits=[(by_id[record_id], score) for record_id, score in ranked.hits],
            scanned=ranked.scanned,
        )


def make_strategy(name: str, scan_window: int = 1000) -> RecallStrategy:
    if name == STRATEGY_STORE:
        return StoreRankedStrategy()
    if name == STRATEGY_SCAN:
        return ScanRankedStrategy(window=scan_window)
    raise ValueError(f"Unknown recall strategy '{name}'")
