"""
FastAPI application factory.

Startup builds the per-process objects and hangs them on app.state:
  database  Database (engine + session factory)
  memory    MemoryService
Shutdown releases them in reverse order.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import router
from .core.config import Settings, get_settings
from .core.database import Database
from .core.flags import get_flags
from .memory.embeddings import EmbeddingProvider
from .memory.service import build_memory_service
from .orchestrator.registry import get_registry
from .services.llm import close_client
from .tools.registry import init_tools

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


async def _startup(app: FastAPI, settings: Settings, embedder: Optional[EmbeddingProvider]) -> None:
    configure_logging(settings.log_level)
    flags = get_flags()
    logger.info("Starting Omni (env=%s)", settings.env)

    database = Database(settings.database_url, echo=settings.debug)
    memory = build_memory_service(database, settings, flags, embedder=embedder)
    await database.init_schema()
    app.state.database = database
    app.state.memory = memory

    init_tools()
    registry = get_registry()
    logger.info(
        "Omni ready: agents=[%s] vector_index=%s web_search=%s",
        ", ".join(registry.get_agent_names()), flags.use_vector_index, flags.use_web_search,
    )


async def _shutdown(app: FastAPI) -> None:
    memory = getattr(app.state, "memory", None)
    if memory is not None:
        await memory.aclose()
    await close_client()
    database = getattr(app.state, "database", None)
    if database is not None:
        await database.dispose()
    logger.info("Omni stopped")


def create_app(
    settings: Optional[Settings] = None,
    embedder: Optional[EmbeddingProvider] = None,
) -> FastAPI:
    """`embedder` replaces the OpenAI embedding provider (tests, local models)."""
    settings = settings or get_settings()
    dev = settings.env == "development"

    app = FastAPI(
        title="Omni",
        description="Multi-agent assistant with shared semantic memory",
        version="1.0.0",
        docs_url="/docs" if dev else None,
        redoc_url="/redoc" if dev else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()] or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def on_startup():
        await _startup(app, settings, embedder)

    @app.on_event("shutdown")
    async def on_shutdown():
        await _shutdown(app)

    app.include_router(router)
    return app
