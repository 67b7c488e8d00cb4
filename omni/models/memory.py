"""
Semantic memory persistence.

One append-only table of embedded text. Rows are written by the memory
service and never updated by it; updated_at is store-managed.
Categories: research, email, coding, personal, general
Priorities: low, medium, high, critical
"""

from enum import Enum

from pgvector.sqlalchemy import Vector
from sqlalchemy import BigInteger, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.config import get_settings
from .base import TimestampedBase

EMBEDDING_DIMENSIONS = get_settings().embedding_dimensions


class MemoryCategory(str, Enum):
    RESEARCH = "research"
    EMAIL = "email"
    CODING = "coding"
    PERSONAL = "personal"
    GENERAL = "general"


class MemoryPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MemoryRecord(TimestampedBase):
    __tablename__ = "semantic_memories"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    # pgvector on PostgreSQL; SQLite keeps the list as JSON (scan-ranked recall only).
    embedding: Mapped[list[float]] = mapped_column(
        Vector(EMBEDDING_DIMENSIONS).with_variant(JSON(), "sqlite"), nullable=False
    )
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    category: Mapped[str] = mapped_column(
        String(50), nullable=False, default=MemoryCategory.GENERAL.value, index=True
    )
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MemoryPriority.MEDIUM.value, index=True
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    owner_agent: Mapped[str] = mapped_column(String(255), nullable=True, index=True)
    conversation_thread: Mapped[str] = mapped_column(String(255), nullable=True, index=True)

    __table_args__ = (
        # Approximate NN index keyed by cosine distance, the operator recall uses.
        Index(
            "ix_semantic_memories_embedding",
            "embedding",
            postgresql_using="ivfflat",
            postgresql_with={"lists": 100},
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ).ddl_if(dialect="postgresql"),
    )
