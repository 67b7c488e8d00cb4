"""
Agent registry. The coordinator is always present; each specialist is
registered only when its FF_ENABLE_* flag is on.
"""

import logging
from typing import Optional

from ..core.flags import FeatureFlags, get_flags
from .base_agent import BaseAgent

logger = logging.getLogger(__name__)

DEFAULT_AGENT = "omni"


class AgentRegistry:
    def __init__(self):
        self._agents: dict[str, BaseAgent] = {}

    def register(self, agent: BaseAgent) -> None:
        if not agent.name:
            raise ValueError(f"{type(agent).__name__} has no name")
        if agent.name in self._agents:
            logger.warning("Agent '%s' registered twice, keeping the newer one", agent.name)
        self._agents[agent.name] = agent

    def get(self, name: str) -> Optional[BaseAgent]:
        return self._agents.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._agents

    def get_agent_names(self) -> list[str]:
        return list(self._agents)

    def get_agent_descriptions(self) -> list[dict]:
        return [agent.describe() for agent in self._agents.values()]


def _specialists(flags: FeatureFlags) -> list[BaseAgent]:
    agents: list[BaseAgent] = []
    if flags.enable_research_agent:
        from ..agents.research.handler import ResearchAgent
        agents.append(ResearchAgent())
    if flags.enable_email_agent:
        from ..agents.email.handler import EmailAgent
        agents.append(EmailAgent())
    if flags.enable_coding_agent:
        from ..agents.coding.handler import CodingAgent
        agents.append(CodingAgent())
    if flags.enable_personal_agent:
        from ..agents.personal.handler import PersonalAgent
        agents.append(PersonalAgent())
    return agents


def build_registry(flags: Optional[FeatureFlags] = None) -> AgentRegistry:
    from ..agents.omni.handler import OmniAgent

    registry = AgentRegistry()
    registry.register(OmniAgent())
    for agent in _specialists(flags or get_flags()):
        registry.register(agent)

    logger.info("Agents ready: %s", ", ".join(registry.get_agent_names()))
    return registry


_registry: Optional[AgentRegistry] = None


def get_registry() -> AgentRegistry:
    """Process-wide registry, built from the flags on first use."""
    global _registry
    if _registry is None:
        _registry = build_registry()
    return _registry
