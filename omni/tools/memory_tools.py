"""
Memory tools. Let any agent store and recall semantic memories.

Both return the envelope as JSON (camelCase keys). A failed call is a normal
result with success=false, so the loop keeps going.

ownerAgent and conversationThread default to the calling agent and the
current session.
"""

import json

from ..core.config import get_settings
from ..models.memory import MemoryCategory, MemoryPriority
from .registry import tool, ToolRisk

CATEGORY_VALUES = [c.value for c in MemoryCategory]
PRIORITY_VALUES = [p.value for p in MemoryPriority]

# Schema bounds come from the same settings MemoryConfig is built from.
_settings = get_settings()
MAX_LIMIT = _settings.memory_max_limit
DEFAULT_LIMIT = _settings.memory_default_limit
DEFAULT_MIN_SIMILARITY = _settings.memory_min_similarity

NO_MEMORY = json.dumps({"success": False, "message": "Memory is not available in this context."})


@tool(
    name="memory_store",
    description=(
        "Store a piece of information in long-term semantic memory so it can be "
        "found later by meaning, not just keywords. "
        "\n\nWhen to use: the user states a preference or fact worth keeping, you "
        "finish research worth reusing, or a decision is made. "
        "\n\nCategories: research, email, coding, personal, general. "
        "Priorities: low, medium, high, critical. "
        "\n\nReturns: JSON {success, id, message, embeddingDimensions}."
    ),
    parameters={
        "type": "object",
        "properties": {
            "content": {
                "type": "string",
                "description": "The information to remember. One self-contained statement works best.",
            },
            "category": {"type": "string", "enum": CATEGORY_VALUES},
            "priority": {"type": "string", "enum": PRIORITY_VALUES},
            "tags": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Short keywords for coarse filtering",
            },
            "metadata": {
                "type": "object",
                "description": "Any structured context (source URL, project, ...)",
            },
            "ownerAgent": {"type": "string", "description": "Defaults to you"},
            "conversationThread": {"type": "string", "description": "Defaults to this conversation"},
        },
        "required": ["content"],
    },
    risk=ToolRisk.WRITE,
    category="memory",
)
async def memory_store(
    content: str,
    category: str = None,
    priority: str = None,
    tags: list = None,
    metadata: dict = None,
    ownerAgent: str = None,
    conversationThread: str = None,
    memory=None,
    agent_name: str = "",
    session_id: str = "",
    **kwargs,
) -> str:
    if memory is None:
        return NO_MEMORY

    result = await memory.store(
        content=content,
        category=category,
        priority=priority,
        tags=tags,
        metadata=metadata,
        owner_agent=ownerAgent or agent_name or None,
        conversation_thread=conversationThread or session_id or None,
    )
    return result.to_json()


@tool(
    name="memory_recall",
    description=(
        "Search long-term semantic memory for information related to a query. "
        "Matches by meaning: 'what language does the user like' finds "
        "'The user prefers Python'. "
        "\n\nWhen to use: before answering anything that may depend on earlier "
        "preferences, findings, or decisions. "
        "\n\nFilters are exact matches; use 'all' or omit them to search everything. "
        "Results are ordered by similarity (0-1, higher is closer). "
        "\n\nReturns: JSON {success, results, totalFound, message}."
    ),
    parameters={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "What you are looking for, in plain language"},
            "category": {"type": "string", "enum": CATEGORY_VALUES + ["all"]},
            "priority": {"type": "string", "enum": PRIORITY_VALUES + ["all"]},
            "ownerAgent": {"type": "string", "description": "Only memories written by this agent"},
            "conversationThread": {"type": "string", "description": "Only memories from this conversation"},
            "limit": {
                "type": "integer", "minimum": 1, "maximum": MAX_LIMIT,
                "description": f"Max results (default {DEFAULT_LIMIT})",
            },
            "minSimilarity": {
                "type": "number", "minimum": 0, "maximum": 1,
                "description": f"Drop results below this similarity (default {DEFAULT_MIN_SIMILARITY})",
            },
        },
        "required": ["query"],
    },
    risk=ToolRisk.READ,
    category="memory",
)
async def memory_recall(
    query: str,
    category: str = None,
    priority: str = None,
    ownerAgent: str = None,
    conversationThread: str = None,
    limit: int = None,
    minSimilarity: float = None,
    memory=None,
    **kwargs,
) -> str:
    if memory is None:
        return NO_MEMORY

    # Recall spans all agents and conversations unless the LLM narrows it.
    result = await memory.recall(
        query=query,
        category=category,
        priority=priority,
        owner_agent=ownerAgent,
        conversation_thread=conversationThread,
        limit=limit,
        min_similarity=minSimilarity,
    )
    return result.to_json()
