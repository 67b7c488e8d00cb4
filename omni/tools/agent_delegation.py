"""
Agent delegation tool (agents-as-tools pattern).

The coordinator hands a self-contained task to a specialist and gets its
final answer back as the tool result. Specialists run with their own tool
list and a fresh state; they share the caller's memory service, DB session
and conversation id, so what they store is visible to everyone.
"""

import logging

from ..orchestrator.registry import get_registry
from .registry import tool, ToolRisk

logger = logging.getLogger(__name__)

SUB_AGENTS = ["research", "email", "coding", "personal"]
SUB_AGENT_MAX_ROUNDS = 5


@tool(
    name="delegate_to_agent",
    description=(
        "Delegate a specific task to a specialized agent and get its answer back. "
        "\n\nAgents: "
        "\n- research: deep research, fact-checking, web search and scraping, source synthesis "
        "\n- email: composing and reviewing emails, templates, professional correspondence "
        "\n- coding: writing, reviewing and debugging code, architecture advice "
        "\n- personal: scheduling, planning, goals, productivity, personal organization "
        "\n\nWhen to use: the request clearly belongs to one specialty and needs depth. "
        "Answer simple questions yourself. "
        "\n\nProvide: a self-contained task. Put anything the agent needs from the "
        "conversation in `context`; it does not see the chat history."
    ),
    parameters={
        "type": "object",
        "properties": {
            "agent_type": {"type": "string", "enum": SUB_AGENTS},
            "task": {"type": "string", "description": "The specific task or question"},
            "context": {"type": "string", "description": "Additional context for the agent"},
        },
        "required": ["agent_type", "task"],
    },
    risk=ToolRisk.EXTERNAL,
    category="orchestration",
)
async def delegate_to_agent(
    agent_type: str,
    task: str,
    context: str = None,
    db=None,
    memory=None,
    session_id: str = "",
    **kwargs,
) -> str:
    if agent_type not in SUB_AGENTS:
        return f"Unknown agent '{agent_type}'. Choose one of: {', '.join(SUB_AGENTS)}."

    agent = get_registry().get(agent_type)
    if not agent:
        return (
            f"The {agent_type} agent is not enabled. "
            "Handle the task yourself or tell the user it's unavailable."
        )

    message = f"{task}\n\nContext: {context}" if context else task
    logger.info("Delegating to %s: %s", agent_type, task[:100])

    try:
        response = await agent.handle(
            message=message,
            state={},
            db=db,
            memory=memory,
            session_id=session_id,
            history=None,
            max_rounds=SUB_AGENT_MAX_ROUNDS,
        )
    except Exception as e:
        logger.error("%s agent failed: %s", agent_type, e)
        return f"The {agent_type} agent ran into an issue: {e}. Try a different approach."

    logger.info("%s agent finished: %d chars", agent_type, len(response.content or ""))
    return f"[{agent.display_name}]\n{response.content}"
