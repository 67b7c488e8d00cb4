"""
Conversations and messages. Used by the orchestrator and all agents.
One conversation per session_id; session_id doubles as the memory
conversation_thread so recalled memories can be scoped to a chat.
"""

from sqlalchemy import String, Text, Integer, JSON, ForeignKey
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import RecordBase


class Conversation(RecordBase):
    __tablename__ = "conversations"

    session_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    user_id: Mapped[str] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String, nullable=True)

    # Orchestrator state, e.g. {"last_agent": "research"}
    # MutableDict so in-place mutations are flushed.
    state: Mapped[dict] = mapped_column(MutableDict.as_mutable(JSON), nullable=True, default=dict)

    messages: Mapped[list["Message"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.sequence_number",
    )


class Message(RecordBase):
    __tablename__ = "messages"

    conversation_id: Mapped[str] = mapped_column(
        String, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String, nullable=False)  # user, assistant
    content: Mapped[str] = mapped_column(Text, nullable=True)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    metadata_: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=True, default=dict
    )
    # Stores: agent, tool_calls, rounds, elapsed_ms, tokens

    conversation: Mapped["Conversation"] = relationship(back_populates="messages")
