"""
Memory error taxonomy.

The service catches these at its boundary and turns them into a failure
envelope. Nothing here is retried.
"""


class MemoryEngineError(Exception):
    """Base class. str(e) is the human-readable reason shown to the caller."""


class ProviderError(MemoryEngineError):
    """The embedding provider call failed (network, auth, rate limit, bad payload)."""


class StoreError(MemoryEngineError):
    """The record store call failed (connectivity, constraint, malformed query)."""


class ValidationError(MemoryEngineError):
    """Input violates the contract. Raised before any I/O."""


class DimensionMismatchError(ValidationError):
    """Two vectors that must share a dimensionality don't."""

    def __init__(self, expected: int, actual: int, record_id=None):
        self.expected = expected
        self.actual = actual
        self.record_id = record_id
        where = f" (memory {record_id})" if record_id is not None else ""
        super().__init__(
            f"embedding dimension mismatch{where}: expected {expected}, got {actual}"
        )
