"""
Semantic memory service. The tool boundary for the write and read paths.

store():  validate -> embed -> check dimensions -> insert one row
recall(): validate -> embed -> check dimensions -> strategy ranks -> envelope

Neither method raises. Every failure (provider, store, validation) comes back
as an envelope with success=False and a short reason, so an LLM tool loop can
keep going after a bad call.
"""

import logging
import time
from dataclasses import replace
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..core.database import Database
from ..models.memory import EMBEDDING_DIMENSIONS, MemoryCategory, MemoryPriority, MemoryRecord
from .config import STRATEGY_SCAN, STRATEGY_STORE, MemoryConfig
from .embeddings import EmbeddingProvider, OpenAIEmbeddingProvider
from .errors import DimensionMismatchError, MemoryEngineError, StoreError, ValidationError
from .similarity import as_vector
from .strategies import ANY, RecallFilters, RecallStrategy, make_strategy
from .types import MemoryHit, RecallResult, StoreResult

logger = logging.getLogger(__name__)

CATEGORIES = {c.value for c in MemoryCategory}
PRIORITIES = {p.value for p in MemoryPriority}


def _store_error(e: Exception) -> StoreError:
    reason = str(getattr(e, "orig", None) or e).strip().splitlines()
    return StoreError(f"database error ({type(e).__name__}): {reason[0] if reason else 'unknown'}")


class MemoryService:
    def __init__(
        self,
        database: Database,
        embedder: EmbeddingProvider,
        config: MemoryConfig,
        strategy: Optional[RecallStrategy] = None,
    ):
        self.database = database
        self.embedder = embedder
        self.config = config
        self.strategy = strategy or make_strategy(config.strategy, config.scan_window)

    async def aclose(self) -> None:
        await self.embedder.aclose()

    # ── Validation ───────────────────────────────────────────────────

    def _check_text(self, value, field: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field} must be a non-empty string")
        return value

    def _check_enum(self, value, allowed: set, field: str, default: str, allow_any=False):
        if value is None:
            return default
        if allow_any and value == ANY:
            return ANY
        if value not in allowed:
            raise ValidationError(
                f"{field} '{value}' is not one of: {', '.join(sorted(allowed))}"
            )
        return value

    def _check_limit(self, limit) -> int:
        if limit is None:
            return self.config.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError("limit must be an integer")
        if not self.config.min_limit <= limit <= self.config.max_limit:
            raise ValidationError(
                f"limit must be between {self.config.min_limit} and {self.config.max_limit}, got {limit}"
            )
        return limit

    def _check_threshold(self, min_similarity) -> float:
        if min_similarity is None:
            return self.config.default_min_similarity
        if isinstance(min_similarity, bool) or not isinstance(min_similarity, (int, float)):
            raise ValidationError("minSimilarity must be a number")
        if not 0.0 <= min_similarity <= 1.0:
            raise ValidationError(f"minSimilarity must be within [0, 1], got {min_similarity}")
        return float(min_similarity)

    async def _embed(self, text: str) -> list[float]:
        """Embed and enforce the collection's dimensionality."""
        start = time.monotonic()
        vector = await self.embedder.embed(text)
        as_vector(vector)
        if len(vector) != self.config.embedding_dimensions:
            raise DimensionMismatchError(self.config.embedding_dimensions, len(vector))
        logger.debug(
            "Embedded %d chars -> %d dims in %dms",
            len(text), len(vector), int((time.monotonic() - start) * 1000),
        )
        return vector

    # ── Write path ───────────────────────────────────────────────────

    async def store(
        self,
        content: str,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        tags: Optional[list[str]] = None,
        metadata: Optional[dict] = None,
        owner_agent: Optional[str] = None,
        conversation_thread: Optional[str] = None,
    ) -> StoreResult:
        try:
            content = self._check_text(content, "content")
            category = self._check_enum(
                category, CATEGORIES, "category", MemoryCategory.GENERAL.value
            )
            priority = self._check_enum(
                priority, PRIORITIES, "priority", MemoryPriority.MEDIUM.value
            )
            tags = list(tags or [])
            if not all(isinstance(t, str) for t in tags):
                raise ValidationError("tags must be a list of strings")
            metadata = dict(metadata or {})

            logger.info(
                "Storing memory: %d chars | category=%s priority=%s tags=%d owner=%s",
                len(content), category, priority, len(tags), owner_agent,
            )

            embedding = await self._embed(content)

            record = MemoryRecord(
                content=content,
                embedding=embedding,
                metadata_=metadata,
                category=category,
                priority=priority,
                tags=tags,
                owner_agent=owner_agent,
                conversation_thread=conversation_thread,
            )
            try:
                async with self.database.session() as session:
                    session.add(record)
                    await session.flush()
                    record_id = record.id
            except (SQLAlchemyError, OSError) as e:
                raise _store_error(e) from e

            logger.info("Memory stored: id=%s", record_id)
            return StoreResult(
                success=True,
                message=f"Memory stored with ID {record_id}",
                id=record_id,
                embedding_dimensions=len(embedding),
                category=category,
            )

        except MemoryEngineError as e:
            logger.warning("Memory store failed: %s", e)
            return StoreResult(success=False, message=f"Failed to store memory: {e}")
        except Exception as e:
            logger.error("Memory store crashed: %s", e, exc_info=True)
            return StoreResult(
                success=False, message=f"Failed to store memory: {type(e).__name__}: {e}"
            )

    # ── Read path ────────────────────────────────────────────────────

    async def recall(
        self,
        query: str,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        owner_agent: Optional[str] = None,
        conversation_thread: Optional[str] = None,
        limit: Optional[int] = None,
        min_similarity: Optional[float] = None,
    ) -> RecallResult:
        query_text = query if isinstance(query, str) else ""
        try:
            query = self._check_text(query, "query")
            filters = RecallFilters(
                category=self._check_enum(category, CATEGORIES, "category", None, allow_any=True),
                priority=self._check_enum(priority, PRIORITIES, "priority", None, allow_any=True),
                owner_agent=owner_agent,
                conversation_thread=conversation_thread,
            )
            limit = self._check_limit(limit)
            threshold = self._check_threshold(min_similarity)

            logger.info(
                "Recall: '%s' | filters=%s limit=%d min=%.2f strategy=%s",
                query[:60], filters.active(), limit, threshold, self.strategy.name,
            )

            embedding = await self._embed(query)

            try:
                async with self.database.session() as session:
                    ranked = await self.strategy.search(
                        session, embedding, filters, limit, threshold
                    )
            except (SQLAlchemyError, OSError) as e:
                raise _store_error(e) from e

            precision = self.config.similarity_precision
            hits = [
                MemoryHit(
                    id=record.id,
                    content=record.content,
                    category=record.category,
                    priority=record.priority,
                    tags=list(record.tags or []),
                    owner_agent=record.owner_agent,
                    conversation_thread=record.conversation_thread,
                    similarity=round(score, precision),
                    metadata=dict(record.metadata_ or {}),
                    created_at=record.created_at.isoformat() if record.created_at else None,
                )
                for record, score in ranked.hits
            ]

            logger.info(
                "Recall done: scanned=%s returned=%d top=%s",
                ranked.scanned if ranked.scanned is not None else "store",
                len(hits),
                hits[0].similarity if hits else None,
            )

            if hits:
                message = f"Found {len(hits)} relevant memories"
            else:
                message = "No memories found matching the query"
                if ranked.scanned is not None:
                    message += f" ({ranked.scanned} scanned)"

            return RecallResult(
                success=True,
                message=message,
                results=hits,
                total_found=len(hits),
                total_scanned=ranked.scanned,
                query=query,
                strategy=self.strategy.name,
            )

        except MemoryEngineError as e:
            logger.warning("Memory recall failed: %s", e)
            return RecallResult(
                success=False, message=f"Search failed: {e}", query=query_text,
                strategy=self.strategy.name,
            )
        except Exception as e:
            logger.error("Memory recall crashed: %s", e, exc_info=True)
            return RecallResult(
                success=False, message=f"Search failed: {type(e).__name__}: {e}",
                query=query_text, strategy=self.strategy.name,
            )


def build_memory_service(
    database: Database,
    settings,
    flags,
    embedder: Optional[EmbeddingProvider] = None,
) -> MemoryService:
    """
    Wire the memory service for `database`.

    The Vector(D) column is sized from the process settings when the models are
    imported, so on PostgreSQL the injected settings must agree with it.
    """
    config = MemoryConfig.from_settings(settings, flags)
    if not database.is_sqlite and config.embedding_dimensions != EMBEDDING_DIMENSIONS:
        raise ValueError(
            f"EMBEDDING_DIMENSIONS={config.embedding_dimensions} does not match the "
            f"semantic_memories.embedding column (vector({EMBEDDING_DIMENSIONS})); "
            "D is fixed per process"
        )
    if config.strategy == STRATEGY_STORE and database.is_sqlite:
        logger.warning("SQLite has no pgvector, recall falls back to in-process scan")
        config = replace(config, strategy=STRATEGY_SCAN)
    if embedder is None:
        embedder = OpenAIEmbeddingProvider(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=config.embedding_model,
            timeout=settings.embedding_timeout,
        )
    service = MemoryService(database, embedder, config)
    logger.info(
        "Memory service ready: strategy=%s dims=%d min_similarity=%.2f",
        service.strategy.name, config.embedding_dimensions, config.default_min_similarity,
    )
    return service
