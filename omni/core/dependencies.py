"""
FastAPI dependencies. Injected into route handlers.

Everything hangs off app.state, set up in the factory's startup hook:
  app.state.database  Database
  app.state.memory    MemoryService
"""

from typing import AsyncIterator

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..memory.service import MemoryService
from .database import Database


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialised",
        )
    return database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Yields an async DB session per request. Commits on success, rolls back on error."""
    async with get_database(request).session() as session:
        yield session


def get_memory(request: Request) -> MemoryService:
    memory = getattr(request.app.state, "memory", None)
    if memory is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Memory service not initialised",
        )
    return memory
