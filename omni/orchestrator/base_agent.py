"""
Agent interface. An agent takes one message and returns an AgentResponse;
the orchestrator owns persistence, the agent owns the reply.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession


@dataclass
class AgentResponse:
    content: str = ""
    # Saved under conversations.state["agent_state"][agent.name]; empty means unchanged.
    state_update: dict = field(default_factory=dict)
    # agent, tool_calls, rounds, elapsed_ms, tokens
    metadata: dict = field(default_factory=dict)


class BaseAgent(ABC):
    name: str = ""
    display_name: str = ""
    description: str = ""
    capabilities: list[str] = []
    tool_names: list[str] = []

    @abstractmethod
    async def handle(
        self,
        message: str,
        state: dict,
        db: Optional[AsyncSession] = None,
        memory=None,
        session_id: str = "",
        history: Optional[list[dict]] = None,
        **kwargs,
    ) -> AgentResponse:
        """
        Answer `message`.

        `state` is this agent's slice of the conversation state. `memory` is the
        MemoryService every agent shares, and `session_id` doubles as the
        memory conversation thread. `history` is [{role, content}] oldest first,
        without the current message.
        """

    def describe(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "tools": list(self.tool_names),
        }
