"""
Memory API. The same store/recall contract the agents' tools use.

POST /v1/memories         Store a memory
POST /v1/memories/search  Recall by similarity
GET  /v1/memories/stats   Counts and age range

Bodies and responses use camelCase (ownerAgent, minSimilarity, totalFound...).
A failed store/recall is HTTP 200 with success=false, same as the tool result.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..core.database import Database
from ..core.dependencies import get_database, get_memory
from ..memory.maintenance import memory_stats
from ..memory.service import MemoryService
from ..memory.types import RecallResult, StoreResult

logger = logging.getLogger(__name__)

memory_router = APIRouter(prefix="/memories", tags=["memory"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoreRequest(CamelModel):
    content: str
    category: Optional[str] = None
    priority: Optional[str] = None
    tags: Optional[list[str]] = None
    metadata: Optional[dict] = None
    owner_agent: Optional[str] = None
    conversation_thread: Optional[str] = None


class RecallRequest(CamelModel):
    query: str
    category: Optional[str] = None
    priority: Optional[str] = None
    owner_agent: Optional[str] = None
    conversation_thread: Optional[str] = None
    limit: Optional[int] = None
    min_similarity: Optional[float] = None


@memory_router.post("", response_model=StoreResult)
async def store_memory(
    request: StoreRequest,
    memory: MemoryService = Depends(get_memory),
):
    return await memory.store(**request.model_dump())


@memory_router.post("/search", response_model=RecallResult)
async def search_memories(
    request: RecallRequest,
    memory: MemoryService = Depends(get_memory),
):
    return await memory.recall(**request.model_dump())


@memory_router.get("/stats")
async def stats(database: Database = Depends(get_database)):
    return await memory_stats(database)
