"""
Conversation persistence for the orchestrator.

A session_id maps to exactly one Conversation row. Messages are numbered
1, 2, 3... per conversation. Orchestrator state (last agent, per-agent state)
is a JSON column on the conversation.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from ..models.conversation import Conversation, Message

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 80


def _title_from(text: str) -> str:
    title = " ".join(text.split())
    if len(title) > TITLE_MAX_CHARS:
        title = title[:TITLE_MAX_CHARS].rstrip() + "..."
    return title


async def get_conversation(db: AsyncSession, session_id: str) -> Optional[Conversation]:
    rows = await db.execute(select(Conversation).where(Conversation.session_id == session_id))
    return rows.scalar_one_or_none()


async def get_or_create_conversation(db: AsyncSession, session_id: str, user_id: str = "") -> Conversation:
    convo = await get_conversation(db, session_id)
    if convo is not None:
        return convo

    convo = Conversation(session_id=session_id, user_id=user_id or None, state={})
    db.add(convo)
    await db.flush()
    logger.info("New conversation %s for session %s", convo.id, session_id)
    return convo


async def update_state(db: AsyncSession, convo: Conversation, updates: dict) -> dict:
    """Shallow-merge `updates` into convo.state and flush."""
    convo.state = {**(convo.state or {}), **updates}
    flag_modified(convo, "state")
    await db.flush()
    return convo.state


async def _next_sequence(db: AsyncSession, convo: Conversation) -> int:
    highest = await db.scalar(
        select(func.max(Message.sequence_number)).where(Message.conversation_id == convo.id)
    )
    return (highest or 0) + 1


async def add_message(
    db: AsyncSession,
    convo: Conversation,
    role: str,
    content: str,
    metadata: Optional[dict] = None,
) -> Message:
    """Append a message. The first user message also names the conversation."""
    msg = Message(
        conversation_id=convo.id,
        role=role,
        content=content,
        sequence_number=await _next_sequence(db, convo),
        metadata_=dict(metadata or {}),
    )
    db.add(msg)
    if role == "user" and not convo.title and content.strip():
        convo.title = _title_from(content)
    await db.flush()
    return msg


async def get_recent_messages(db: AsyncSession, convo: Conversation, limit: int = 30) -> list[Message]:
    """The last `limit` messages, oldest first."""
    rows = await db.execute(
        select(Message)
        .where(Message.conversation_id == convo.id)
        .order_by(Message.sequence_number.desc())
        .limit(limit)
    )
    return list(reversed(rows.scalars().all()))


def build_history(messages: list[Message], exclude_last: bool = True) -> list[dict]:
    """[{role, content}] for the LLM, skipping empty messages."""
    if exclude_last:
        messages = messages[:-1]
    return [{"role": m.role, "content": m.content} for m in messages if m.content]
