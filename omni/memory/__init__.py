"""
Semantic memory: embed text, persist it, recall it by cosine similarity.
"""

from .config import MemoryConfig, STRATEGY_SCAN, STRATEGY_STORE
from .embeddings import EmbeddingProvider, OpenAIEmbeddingProvider
from .errors import (
    DimensionMismatchError,
    MemoryEngineError,
    ProviderError,
    StoreError,
    ValidationError,
)
from .service import MemoryService, build_memory_service
from .strategies import RecallFilters, RecallStrategy, ScanRankedStrategy, StoreRankedStrategy
from .types import MemoryHit, RecallResult, StoreResult

__all__ = [
    "MemoryConfig", "STRATEGY_SCAN", "STRATEGY_STORE",
    "EmbeddingProvider", "OpenAIEmbeddingProvider",
    "MemoryEngineError", "ProviderError", "StoreError", "ValidationError",
    "DimensionMismatchError",
    "MemoryService", "build_memory_service",
    "RecallFilters", "RecallStrategy", "ScanRankedStrategy", "StoreRankedStrategy",
    "MemoryHit", "RecallResult", "StoreResult",
]
