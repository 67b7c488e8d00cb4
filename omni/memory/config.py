"""
Memory configuration. Every default the write and read paths use lives here,
so the two recall strategies can't drift apart.
"""

from dataclasses import dataclass

STRATEGY_STORE = "store"
STRATEGY_SCAN = "scan"


@dataclass(frozen=True)
class MemoryConfig:
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    default_limit: int = 5
    min_limit: int = 1
    max_limit: int = 20

    # One threshold for both strategies. text-embedding-3 scores paraphrases
    # around 0.5-0.7.
    default_min_similarity: float = 0.5

    # Scan-ranked recall loads at most this many full vectors per request.
    # Older records outside the window are invisible to the scan path.
    scan_window: int = 1000

    similarity_precision: int = 3
    strategy: str = STRATEGY_STORE

    def __post_init__(self):
        if self.strategy not in (STRATEGY_STORE, STRATEGY_SCAN):
            raise ValueError(f"Unknown recall strategy '{self.strategy}'")
        if not 1 <= self.min_limit <= self.default_limit <= self.max_limit:
            raise ValueError("Memory limits must satisfy 1 <= min <= default <= max")
        if not 0.0 <= self.default_min_similarity <= 1.0:
            raise ValueError("default_min_similarity must be within [0, 1]")
        if self.scan_window < 1:
            raise ValueError("scan_window must be positive")

    @classmethod
    def from_settings(cls, settings, flags) -> "MemoryConfig":
        return cls(
            embedding_model=settings.embedding_model,
            embedding_dimensions=settings.embedding_dimensions,
            default_limit=settings.memory_default_limit,
            max_limit=settings.memory_max_limit,
            default_min_similarity=settings.memory_min_similarity,
            scan_window=settings.memory_scan_window,
            strategy=STRATEGY_STORE if flags.use_vector_index else STRATEGY_SCAN,
        )
