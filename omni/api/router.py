"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "omni"}


# ── V1 routes ────────────────────────────────────────────────────────

from .chat import chat_router
from .conversations import conversations_router
from .memory import memory_router

router.include_router(chat_router, prefix="/v1")
router.include_router(conversations_router, prefix="/v1")
router.include_router(memory_router, prefix="/v1")
