"""Tests for the tool-calling loop, delegation and the orchestrator (LLM mocked)."""

import json

import pytest

from omni.agents.coding.handler import CodingAgent
from omni.agents.omni.handler import OmniAgent
from omni.core.flags import FeatureFlags
from omni.orchestrator import tool_loop
from omni.orchestrator.orchestrator import UnknownAgentError, handle_message
from omni.orchestrator.registry import build_registry, get_registry
from omni.tools.registry import init_tools


def _tool_call(call_id: str, name: str, args: dict) -> dict:
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(args)},
    }


def _reply(content=None, tool_calls=None) -> dict:
    message = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {"choices": [{"message": message}], "usage": {"prompt_tokens": 10, "completion_tokens": 5}}


class ScriptedLLM:
    """Returns canned responses in order and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    async def __call__(self, messages, **kwargs):
        self.requests.append({"messages": [dict(m) for m in messages], **kwargs})
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def tools():
    init_tools()


@pytest.mark.asyncio
async def test_final_answer_without_tools(monkeypatch):
    llm = ScriptedLLM(_reply("Hi there"))
    monkeypatch.setattr("omni.services.llm.chat", llm)

    response = await CodingAgent().handle(message="hello", state={})

    assert response.content == "Hi there"
    assert response.metadata["rounds"] == 1
    assert response.metadata["tokens"] == {"input": 10, "output": 5}
    offered = {t["function"]["name"] for t in llm.requests[0]["tools"]}
    assert offered == {"memory_store", "memory_recall"}


@pytest.mark.asyncio
async def test_tool_loop_stores_memory_then_answers(monkeypatch, memory):
    llm = ScriptedLLM(
        _reply(tool_calls=[_tool_call("c1", "memory_store", {
            "content": "The user prefers Python for backend development.",
            "category": "coding",
        })]),
        _reply("Noted, Python it is."),
    )
    monkeypatch.setattr("omni.services.llm.chat", llm)

    response = await CodingAgent().handle(
        message="I like Python for backends", state={}, memory=memory, session_id="s-1",
    )

    assert response.content == "Noted, Python it is."
    assert response.metadata["tool_calls"][0]["tool"] == "memory_store"

    tool_msg = llm.requests[1]["messages"][-1]
    assert tool_msg["role"] == "tool" and tool_msg["tool_call_id"] == "c1"
    assert json.loads(tool_msg["content"])["success"] is True

    found = await memory.recall("The user prefers Python for backend development.")
    assert found.results[0].owner_agent == "coding"
    assert found.results[0].conversation_thread == "s-1"


@pytest.mark.asyncio
async def test_tool_errors_are_isolated(monkeypatch):
    llm = ScriptedLLM(
        _reply(tool_calls=[
            _tool_call("c1", "web_search", {"query": "x"}),    # not in coding's tool list
            {"id": "c2", "type": "function", "function": {"name": "memory_recall", "arguments": "{oops"}},
        ]),
        _reply("Recovered"),
    )
    monkeypatch.setattr("omni.services.llm.chat", llm)

    response = await CodingAgent().handle(message="go", state={})

    assert response.content == "Recovered"
    results = {m["tool_call_id"]: m["content"] for m in llm.requests[1]["messages"] if m["role"] == "tool"}
    assert results["c1"].startswith("Error: Unknown tool 'web_search'")
    assert results["c2"].startswith("Error: Invalid JSON arguments")


@pytest.mark.asyncio
async def test_max_rounds(monkeypatch):
    looping = _reply(tool_calls=[_tool_call("c", "memory_recall", {"query": "x"})])
    llm = ScriptedLLM(*[looping] * 3)
    monkeypatch.setattr("omni.services.llm.chat", llm)

    response = await CodingAgent().handle(message="go", state={}, max_rounds=3)

    assert response.metadata["hit_max_rounds"] is True
    assert len(llm.requests) == 3


def test_long_history_is_trimmed():
    agent = CodingAgent()
    history = [{"role": "user", "content": "x" * 4000} for _ in range(30)]
    messages = agent._build_messages("latest", history)
    assert messages[0]["role"] == "system"
    assert messages[1]["content"].startswith("[")
    assert messages[-1] == {"role": "user", "content": "latest"}
    assert len(messages) < len(history) + 2


def test_memory_guidance_added_for_memory_agents():
    messages = CodingAgent()._build_messages("hi", None)
    assert "memory_recall" in messages[0]["content"]
    assert tool_loop.MEMORY_GUIDANCE.strip() in messages[0]["content"]


@pytest.mark.asyncio
async def test_coordinator_delegates_to_specialist(monkeypatch, memory):
    llm = ScriptedLLM(
        _reply(tool_calls=[_tool_call("d1", "delegate_to_agent", {
            "agent_type": "email", "task": "Draft a thank-you note", "context": "to Sam",
        })]),
        _reply("Subject: Thank you\n\nHi Sam, ..."),   # the email agent's answer
        _reply("Here's a draft for Sam."),               # the coordinator's final answer
    )
    monkeypatch.setattr("omni.services.llm.chat", llm)

    response = await OmniAgent().handle(message="thank Sam", state={}, memory=memory, session_id="s")

    assert response.content == "Here's a draft for Sam."
    email_request = llm.requests[1]["messages"]
    assert email_request[-1]["content"] == "Draft a thank-you note\n\nContext: to Sam"
    assert "Email Manager" in email_request[0]["content"]
    delegated = llm.requests[2]["messages"][-1]["content"]
    assert delegated.startswith("[Email Manager]\nSubject: Thank you")


@pytest.mark.asyncio
async def test_delegate_rejects_unknown_agent():
    from omni.tools.registry import get_tool_handler

    result = await get_tool_handler("delegate_to_agent")(agent_type="omni", task="loop forever")
    assert result.startswith("Unknown agent 'omni'")


def test_registry_has_coordinator_and_specialists():
    names = get_registry().get_agent_names()
    assert names[0] == "omni"
    assert {"research", "email", "coding", "personal"} <= set(names)
    assert "delegate_to_agent" not in get_registry().get("research").tool_names


@pytest.mark.asyncio
async def test_handle_message_persists_turn(monkeypatch, database, memory):
    monkeypatch.setattr("omni.services.llm.chat", ScriptedLLM(_reply("first answer"), _reply("second answer")))

    async with database.session() as db:
        first = await handle_message("What's on today?", session_id="day-1", db=db, memory=memory)
    async with database.session() as db:
        second = await handle_message("And tomorrow?", session_id="day-1", db=db, memory=memory)

    assert first["agent"] == "omni"
    assert first["conversation_id"] == second["conversation_id"]
    assert second["content"] == "second answer"

    from omni.orchestrator.state import get_conversation, get_recent_messages
    async with database.session() as db:
        convo = await get_conversation(db, "day-1")
        messages = await get_recent_messages(db, convo)
    assert convo.title == "What's on today?"
    assert convo.state["last_agent"] == "omni"
    assert [(m.role, m.sequence_number) for m in messages] == [
        ("user", 1), ("assistant", 2), ("user", 3), ("assistant", 4),
    ]


@pytest.mark.asyncio
async def test_handle_message_history_reaches_llm(monkeypatch, database, memory):
    llm = ScriptedLLM(_reply("one"), _reply("two"))
    monkeypatch.setattr("omni.services.llm.chat", llm)

    async with database.session() as db:
        await handle_message("first", session_id="h", db=db, memory=memory)
        await handle_message("second", session_id="h", db=db, memory=memory)

    sent = [(m["role"], m["content"]) for m in llm.requests[1]["messages"] if m["role"] != "system"]
    assert sent == [("user", "first"), ("assistant", "one"), ("user", "second")]


@pytest.mark.asyncio
async def test_handle_message_agent_failure_still_replies(monkeypatch, database, memory):
    async def broken(*args, **kwargs):
        raise RuntimeError("LLM down")

    monkeypatch.setattr("omni.services.llm.chat", broken)
    async with database.session() as db:
        result = await handle_message("hello", session_id="x", db=db, memory=memory)
    assert result["content"] == "Something went wrong on my end. Please try again."
    assert "RuntimeError" in result["metadata"]["error"]


@pytest.mark.asyncio
async def test_handle_message_unknown_agent(database, memory):
    async with database.session() as db:
        with pytest.raises(UnknownAgentError):
            await handle_message("hi", session_id="x", db=db, memory=memory, agent_name="nobody")


def test_disabled_specialists_are_not_registered():
    flags = FeatureFlags(FF_ENABLE_EMAIL_AGENT=False, FF_ENABLE_PERSONAL_AGENT=False)
    registry = build_registry(flags)
    assert registry.get_agent_names() == ["omni", "research", "coding"]
    assert "email" not in registry
    assert registry.get_agent_descriptions()[0]["tools"] == [
        "delegate_to_agent", "memory_store", "memory_recall",
    ]
