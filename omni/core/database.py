"""
Async SQLAlchemy engine and session management.

One Database instance per process, created at startup and passed to whatever
needs the store (request dependencies, the memory service, scripts).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base. All models inherit from this."""
    pass


def normalize_url(url: str) -> str:
    """Ensure we're using the asyncpg driver for PostgreSQL."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


class Database:
    """Owns the engine + session factory. connect() at startup, dispose() at shutdown."""

    def __init__(self, url: str, echo: bool = False):
        self.url = normalize_url(url)
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.url

    @property
    def dialect(self) -> str:
        return "sqlite" if self.is_sqlite else "postgresql"

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected. Call connect() first.")
        return self._engine

    def connect(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine

        # SQLite doesn't support pool_size / max_overflow
        kwargs = {"echo": self.echo}
        if not self.is_sqlite:
            kwargs["pool_size"] = 20
            kwargs["max_overflow"] = 10
            kwargs["pool_pre_ping"] = True

        self._engine = create_async_engine(self.url, **kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created (%s)", self.dialect)
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """A session that commits on clean exit and rolls back on error."""
        if self._session_factory is None:
            self.connect()
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def init_schema(self) -> None:
        """Enable pgvector (PostgreSQL) and create all tables. Called on startup."""
        engine = self.connect()
        async with engine.begin() as conn:
            if not self.is_sqlite:
                await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))

            # Import all models so they register with Base.metadata
            from ..models import conversation, memory  # noqa: F401

            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")
