"""Shared test fixtures: temp SQLite database, fake embedding provider, memory service."""

import re
import zlib

import pytest
import pytest_asyncio

from omni.core.database import Database
from omni.memory.config import STRATEGY_SCAN, MemoryConfig
from omni.memory.embeddings import EmbeddingProvider
from omni.memory.service import MemoryService

DIMS = 8


def vec(*components: float) -> list[float]:
    """Pad components with zeros up to DIMS."""
    return list(components) + [0.0] * (DIMS - len(components))


class FakeEmbedder(EmbeddingProvider):
    """
    Deterministic embeddings. Known texts map to fixed vectors; anything else
    is a hashed bag of words.
    """

    model = "fake-embedding"

    def __init__(self, vectors: dict = None, dims: int = DIMS, fail: Exception = None):
        self.vectors = dict(vectors or {})
        self.dims = dims
        self.fail = fail
        self.calls: list[str] = []
        self.closed = False

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail is not None:
            raise self.fail
        if text in self.vectors:
            return list(self.vectors[text])
        out = [0.0] * self.dims
        for word in re.findall(r"\w+", text.lower()):
            out[zlib.crc32(word.encode()) % self.dims] += 1.0
        return out

    async def aclose(self) -> None:
        self.closed = True


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.init_schema()
    yield db
    await db.dispose()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def memory_config():
    return MemoryConfig(embedding_dimensions=DIMS, strategy=STRATEGY_SCAN)


@pytest.fixture
def memory(database, embedder, memory_config):
    return MemoryService(database, embedder, memory_config)
