"""
Chat API.

POST /v1/chat    one turn; Omni answers unless `agent` names a specialist
GET  /v1/agents  registered agents and their tools
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import get_db, get_memory
from ..memory.service import MemoryService
from ..orchestrator.orchestrator import UnknownAgentError, handle_message
from ..orchestrator.registry import get_registry

chat_router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    session_id: str = Field(min_length=1, max_length=255)
    agent: Optional[str] = None


class ChatResponse(BaseModel):
    content: str
    agent: str
    conversation_id: str
    session_id: str
    metadata: Optional[dict] = None


@chat_router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    db: AsyncSession = Depends(get_db),
    memory: MemoryService = Depends(get_memory),
):
    try:
        turn = await handle_message(
            message=request.message,
            session_id=request.session_id,
            db=db,
            memory=memory,
            agent_name=request.agent,
        )
    except UnknownAgentError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ChatResponse(**turn)


@chat_router.get("/agents")
async def list_agents():
    return get_registry().get_agent_descriptions()
