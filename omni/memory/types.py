"""
Envelopes returned across the tool boundary.

Field names are snake_case in Python and camelCase on the wire
(`embeddingDimensions`, `ownerAgent`, `totalFound`, ...). Dump with
`model_dump(by_alias=True)`.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class StoreResult(Envelope):
    success: bool
    message: str
    id: Optional[int] = None
    embedding_dimensions: Optional[int] = None
    category: Optional[str] = None


class MemoryHit(Envelope):
    id: int
    content: str
    category: str
    priority: str
    tags: list[str] = Field(default_factory=list)
    owner_agent: Optional[str] = None
    conversation_thread: Optional[str] = None
    similarity: float
    metadata: dict = Field(default_factory=dict)
    created_at: Optional[str] = None


class RecallResult(Envelope):
    success: bool
    message: str
    results: list[MemoryHit] = Field(default_factory=list)
    total_found: int = 0
    # Candidates compared in-process. None when the store ranked them.
    total_scanned: Optional[int] = None
    query: str = ""
    strategy: Optional[str] = None
