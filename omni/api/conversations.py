"""
Conversations API. One conversation per session_id.

GET    /v1/conversations              newest activity first
GET    /v1/conversations/{session_id} with its messages
DELETE /v1/conversations/{session_id} messages go too, memories stay
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_db
from ..models.conversation import Conversation, Message
from ..orchestrator.state import get_conversation as load_conversation

conversations_router = APIRouter(prefix="/conversations", tags=["conversations"])


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


class ConversationSummary(BaseModel):
    id: str
    session_id: str
    title: Optional[str] = None
    last_agent: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_orm_row(cls, convo: Conversation) -> "ConversationSummary":
        return cls(
            id=convo.id,
            session_id=convo.session_id,
            title=convo.title,
            last_agent=(convo.state or {}).get("last_agent"),
            created_at=_iso(convo.created_at),
            updated_at=_iso(convo.updated_at),
        )


class MessageOut(BaseModel):
    id: str
    role: str
    content: Optional[str] = None
    sequence_number: int
    metadata: dict = Field(default_factory=dict)
    created_at: str = ""


class ConversationDetail(ConversationSummary):
    messages: list[MessageOut] = Field(default_factory=list)


async def _require(db: AsyncSession, session_id: str) -> Conversation:
    convo = await load_conversation(db, session_id)
    if convo is None:
        raise HTTPException(status_code=404, detail=f"Conversation '{session_id}' not found")
    return convo


@conversations_router.get("", response_model=list[ConversationSummary])
async def list_conversations(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    rows = await db.execute(
        select(Conversation)
        .order_by(Conversation.updated_at.desc(), Conversation.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return [ConversationSummary.from_orm_row(c) for c in rows.scalars()]


@conversations_router.get("/{session_id}", response_model=ConversationDetail)
async def get_conversation(session_id: str, db: AsyncSession = Depends(get_db)):
    convo = await _require(db, session_id)
    rows = await db.execute(
        select(Message)
        .where(Message.conversation_id == convo.id)
        .order_by(Message.sequence_number)
    )
    detail = ConversationDetail(**ConversationSummary.from_orm_row(convo).model_dump())
    detail.messages = [
        MessageOut(
            id=m.id,
            role=m.role,
            content=m.content,
            sequence_number=m.sequence_number,
            metadata=m.metadata_ or {},
            created_at=_iso(m.created_at),
        )
        for m in rows.scalars()
    ]
    return detail


@conversations_router.delete("/{session_id}")
async def delete_conversation(session_id: str, db: AsyncSession = Depends(get_db)):
    convo = await _require(db, session_id)
    await db.delete(convo)
    await db.flush()
    return {"deleted": True, "session_id": session_id}
