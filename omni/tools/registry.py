"""
Tool registry.

Tools register themselves with @tool at import time; init_tools() imports the
modules. Agents never see the whole registry, only the names in their
`tool_names`, rendered in the OpenAI function-calling format.

A handler is an async function returning a string for the LLM. Besides the
LLM's arguments it receives these keywords from the tool loop, and must accept
**kwargs for the ones it ignores:
  memory      MemoryService
  db          AsyncSession for the current turn
  agent_name  calling agent
  session_id  current conversation
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..core.flags import get_flags

logger = logging.getLogger(__name__)


class ToolRisk(str, Enum):
    READ = "read"
    WRITE = "write"         # writes to the memory store
    EXTERNAL = "external"   # leaves the process (HTTP, other agents)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict
    handler: Callable[..., Awaitable[str]]
    risk: ToolRisk = ToolRisk.READ
    category: str = "general"

    def for_llm(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
                "strict": False,
            },
        }


# Insertion-ordered; re-registering a name replaces the entry in place.
_registry: dict[str, ToolSpec] = {}


def tool(
    name: str,
    description: str,
    parameters: dict,
    risk: ToolRisk = ToolRisk.READ,
    category: str = "general",
):
    """
    Register an async function as an LLM-callable tool.

    `parameters` is a JSON Schema object; `type: object` and
    `additionalProperties: false` are filled in when missing.
    """

    def decorator(func):
        schema = {"type": "object", "additionalProperties": False, **parameters}
        _registry[name] = ToolSpec(name, description, schema, func, risk, category)
        logger.debug("Registered tool: %s [%s/%s]", name, category, risk.value)
        return func

    return decorator


def get_tools_for_llm(names: Optional[list[str]] = None) -> list[dict]:
    """Function-calling definitions, limited to `names` when given. Unknown names are skipped."""
    entries = _registry.values() if names is None else (
        _registry[n] for n in _registry if n in names
    )
    return [entry.for_llm() for entry in entries]


def get_tool_handler(name: str) -> Optional[Callable[..., Awaitable[str]]]:
    entry = _registry.get(name)
    return entry.handler if entry else None


def get_tool_names() -> list[str]:
    return list(_registry)


def get_tool_risk(name: str) -> str:
    entry = _registry.get(name)
    return (entry.risk if entry else ToolRisk.READ).value


def init_tools() -> None:
    """Import tool modules so their @tool decorators run. Safe to call twice."""
    from . import agent_delegation, memory_tools, web_scrape  # noqa: F401

    if get_flags().use_web_search:
        from . import web_search  # noqa: F401

    logger.info("Tools ready: %d [%s]", len(_registry), ", ".join(_registry))
