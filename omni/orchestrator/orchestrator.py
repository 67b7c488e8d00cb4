"""
One chat turn:

    resolve agent -> save user message -> load history -> run agent
    -> save reply -> update conversation state

Omni answers everything unless the caller names an agent; specialists are
otherwise reached through the delegate_to_agent tool. Everything happens in
the caller's session, so a turn commits or rolls back as a whole (memory
writes made by tools commit on their own).
"""

import logging
import time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .base_agent import AgentResponse, BaseAgent
from .registry import DEFAULT_AGENT, get_registry
from .state import add_message, build_history, get_or_create_conversation, get_recent_messages, update_state

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30
FALLBACK_REPLY = "Something went wrong on my end. Please try again."


class UnknownAgentError(LookupError):
    pass


def resolve_agent(agent_name: Optional[str]) -> BaseAgent:
    registry = get_registry()
    name = agent_name or DEFAULT_AGENT
    agent = registry.get(name)
    if agent is None:
        raise UnknownAgentError(
            f"Unknown agent '{name}'. Available: {', '.join(registry.get_agent_names())}"
        )
    return agent


async def _run_agent(agent: BaseAgent, **kwargs) -> AgentResponse:
    try:
        return await agent.handle(**kwargs)
    except Exception as e:
        logger.exception("Agent %s failed", agent.name)
        return AgentResponse(content=FALLBACK_REPLY, metadata={"error": f"{type(e).__name__}: {e}"})


async def handle_message(
    message: str,
    session_id: str,
    db: AsyncSession,
    memory=None,
    agent_name: Optional[str] = None,
    user_id: str = "",
) -> dict:
    """Raises UnknownAgentError before anything is written if `agent_name` isn't registered."""
    started = time.monotonic()
    agent = resolve_agent(agent_name)

    convo = await get_or_create_conversation(db, session_id, user_id)
    await add_message(db, convo, role="user", content=message)
    history = build_history(await get_recent_messages(db, convo, limit=HISTORY_LIMIT))

    state = dict(convo.state or {})
    agent_states = dict(state.get("agent_state") or {})

    response = await _run_agent(
        agent,
        message=message,
        state=dict(agent_states.get(agent.name) or {}),
        db=db,
        memory=memory,
        session_id=session_id,
        history=history,
    )

    await add_message(
        db, convo, role="assistant", content=response.content,
        metadata={"agent": agent.name, **response.metadata},
    )
    updates = {"last_agent": agent.name}
    if response.state_update:
        agent_states[agent.name] = response.state_update
        updates["agent_state"] = agent_states
    await update_state(db, convo, updates)

    logger.info(
        "Turn done: agent=%s session=%s %dms",
        agent.name, session_id, int((time.monotonic() - started) * 1000),
    )
    return {
        "content": response.content,
        "agent": agent.name,
        "conversation_id": convo.id,
        "session_id": session_id,
        "metadata": response.metadata,
    }
