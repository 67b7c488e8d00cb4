"""
ToolCallingAgent: an agent that is only configuration.

    system prompt + allowed tool names + model settings

handle() runs the loop  LLM -> tool calls -> LLM -> ... -> text  with the
calls of one round executed concurrently. A failing tool becomes an error
string for the LLM, never an exception for the caller.
"""

import asyncio
import json
import logging
import time
from typing import Optional

from ..services import llm
from ..tools.registry import get_tool_handler, get_tool_risk, get_tools_for_llm
from .base_agent import AgentResponse, BaseAgent

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 10
MAX_HISTORY_TOKENS = 12000
MAX_TOOL_RESULT_CHARS = 4000
MAX_INPUT_LENGTH = 10000

MEMORY_GUIDANCE = """
## Memory
You share a long-term semantic memory with the other agents.
- Call memory_recall before answering anything that may depend on earlier preferences, findings or decisions.
- Call memory_store for durable facts: user preferences, conclusions, decisions. One self-contained statement per memory.
- Don't store small talk or things that only matter for this turn."""


def _tool_message(call_id: str, content: str) -> dict:
    return {"role": "tool", "tool_call_id": call_id, "content": content}


class ToolCallingAgent(BaseAgent):
    system_prompt: str = ""
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_rounds: int = MAX_TOOL_ROUNDS

    async def handle(
        self,
        message: str,
        state: dict,
        db=None,
        memory=None,
        session_id: str = "",
        history: Optional[list[dict]] = None,
        max_rounds: Optional[int] = None,
        **kwargs,
    ) -> AgentResponse:
        if len(message) > MAX_INPUT_LENGTH:
            return AgentResponse(
                content=(
                    f"Your message is too long ({len(message)} chars). "
                    f"Please keep it under {MAX_INPUT_LENGTH} characters."
                ),
            )

        started = time.monotonic()
        limit = max_rounds or self.max_rounds
        tools = get_tools_for_llm(self.tool_names)
        messages = self._build_messages(message, history)
        calls: list[dict] = []
        tokens = {"input": 0, "output": 0}
        context = {"db": db, "memory": memory, "session_id": session_id}

        for round_num in range(1, limit + 1):
            response = await llm.chat(
                messages=messages,
                model=self.model,
                temperature=self.temperature,
                tools=tools or None,
                tool_choice="auto" if tools else None,
            )
            reply = response["choices"][0]["message"]
            usage = response.get("usage") or {}
            tokens["input"] += usage.get("prompt_tokens", 0)
            tokens["output"] += usage.get("completion_tokens", 0)

            if not reply.get("tool_calls"):
                return self._finish(reply.get("content") or "", started, round_num, calls, tokens)

            messages.append(reply)
            messages.extend(await self._execute_tool_calls(reply["tool_calls"], context, calls))

        logger.warning("%s hit the tool round limit (%d)", self.name, limit)
        response = self._finish(
            "I worked on this for a while but couldn't fully resolve your request. "
            "Could you help me narrow down what you need?",
            started, limit, calls, tokens,
        )
        response.metadata["hit_max_rounds"] = True
        return response

    def _finish(self, content: str, started: float, rounds: int, calls: list, tokens: dict) -> AgentResponse:
        return AgentResponse(
            content=content,
            metadata={
                "agent": self.name,
                "tool_calls": calls or None,
                "rounds": rounds,
                "elapsed_ms": int((time.monotonic() - started) * 1000),
                "tokens": tokens,
            },
        )

    def _build_messages(self, message: str, history: Optional[list[dict]]) -> list[dict]:
        prompt = self.system_prompt
        if "memory_recall" in self.tool_names:
            prompt += "\n" + MEMORY_GUIDANCE
        return [
            {"role": "system", "content": prompt},
            *self._trim_history(history or []),
            {"role": "user", "content": message},
        ]

    def _trim_history(self, history: list[dict]) -> list[dict]:
        """Drop the oldest messages until the rest fits MAX_HISTORY_TOKENS."""
        kept = list(history)
        while kept and llm.estimate_messages_tokens(kept) > MAX_HISTORY_TOKENS:
            kept.pop(0)
        dropped = len(history) - len(kept)
        if dropped:
            kept.insert(0, {
                "role": "system",
                "content": f"[{dropped} earlier messages were trimmed for length. Use memory_recall for older context.]",
            })
        return kept

    async def _execute_tool_calls(self, tool_calls: list[dict], context: dict, log: list) -> list[dict]:
        """Run one round of tool calls concurrently; results keep the call order."""
        return list(await asyncio.gather(*(self._run_tool(tc, context, log) for tc in tool_calls)))

    async def _run_tool(self, tc: dict, context: dict, log: list) -> dict:
        name = tc["function"]["name"]
        try:
            args = json.loads(tc["function"].get("arguments") or "{}")
        except json.JSONDecodeError as e:
            logger.error("Bad arguments for %s: %s", name, e)
            return _tool_message(
                tc["id"],
                f"Error: Invalid JSON arguments for {name}. Fix the format and retry. Details: {e}",
            )

        handler = get_tool_handler(name) if name in self.tool_names else None
        if handler is None:
            logger.warning("%s called unavailable tool %s", self.name, name)
            return _tool_message(
                tc["id"],
                f"Error: Unknown tool '{name}'. Available tools: {', '.join(self.tool_names)}.",
            )

        log.append({"tool": name, "args": args, "risk": get_tool_risk(name)})
        started = time.monotonic()
        try:
            result = str(await handler(**args, agent_name=self.name, **context))
        except Exception as e:
            logger.error("Tool %s failed after %dms: %s", name, int((time.monotonic() - started) * 1000), e)
            return _tool_message(
                tc["id"],
                f"Tool error ({name}): {type(e).__name__}: {e}. "
                "Retry with different arguments or take another approach.",
            )

        logger.info("Tool %s done in %dms (%d chars)", name, int((time.monotonic() - started) * 1000), len(result))
        if len(result) > MAX_TOOL_RESULT_CHARS:
            result = result[:MAX_TOOL_RESULT_CHARS - 100] + "\n\n... [truncated, narrow the query or add filters]"
        return _tool_message(tc["id"], result)
