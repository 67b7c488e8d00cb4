"""Tests for the tool registry and the memory / scrape tools."""

import json

import pytest

from omni.core.config import get_settings
from omni.tools.registry import (
    get_tool_handler,
    get_tool_names,
    get_tool_risk,
    get_tools_for_llm,
    init_tools,
)
from omni.tools.web_scrape import MAX_CONTENT_CHARS, extract_text
from omni.tools.web_search import format_results


@pytest.fixture(autouse=True)
def tools():
    init_tools()


def test_core_tools_registered():
    names = get_tool_names()
    for name in ("memory_store", "memory_recall", "web_scrape", "delegate_to_agent"):
        assert name in names


def test_get_tools_for_llm_filters_by_name():
    tools = get_tools_for_llm(["memory_recall", "not_a_tool"])
    assert [t["function"]["name"] for t in tools] == ["memory_recall"]
    assert tools[0]["type"] == "function"
    assert tools[0]["function"]["parameters"]["required"] == ["query"]


def test_memory_tool_schemas_use_closed_enums():
    store = get_tools_for_llm(["memory_store"])[0]["function"]["parameters"]
    recall = get_tools_for_llm(["memory_recall"])[0]["function"]["parameters"]
    assert store["properties"]["category"]["enum"] == ["research", "email", "coding", "personal", "general"]
    assert "all" in recall["properties"]["category"]["enum"]
    settings = get_settings()
    assert recall["properties"]["limit"]["maximum"] == settings.memory_max_limit
    assert f"default {settings.memory_default_limit}" in recall["properties"]["limit"]["description"]
    assert f"default {settings.memory_min_similarity}" in recall["properties"]["minSimilarity"]["description"]


@pytest.mark.asyncio
async def test_memory_store_defaults_owner_and_thread(memory):
    handler = get_tool_handler("memory_store")
    raw = await handler(
        content="User's timezone is CET", category="personal",
        memory=memory, agent_name="personal", session_id="sess-42", db=None,
    )
    stored = json.loads(raw)
    assert stored["success"] is True
    assert stored["embeddingDimensions"] == memory.config.embedding_dimensions

    found = json.loads(await get_tool_handler("memory_recall")(
        query="User's timezone is CET", memory=memory, agent_name="omni", session_id="other",
    ))
    assert found["totalFound"] == 1
    assert found["results"][0]["ownerAgent"] == "personal"
    assert found["results"][0]["conversationThread"] == "sess-42"


@pytest.mark.asyncio
async def test_memory_recall_passes_camel_case_arguments(memory):
    await memory.store("alpha", owner_agent="research")
    await memory.store("alpha", owner_agent="coding")

    found = json.loads(await get_tool_handler("memory_recall")(
        query="alpha", ownerAgent="coding", limit=1, minSimilarity=0.9, memory=memory,
    ))
    assert [r["ownerAgent"] for r in found["results"]] == ["coding"]


@pytest.mark.asyncio
async def test_memory_tool_failure_is_a_result_not_an_exception(memory):
    raw = await get_tool_handler("memory_store")(content="x", category="bogus", memory=memory)
    result = json.loads(raw)
    assert result["success"] is False
    assert result["message"].startswith("Failed to store memory: ")


@pytest.mark.asyncio
async def test_memory_tools_without_service():
    result = json.loads(await get_tool_handler("memory_recall")(query="x"))
    assert result["success"] is False


def test_extract_text_strips_markup():
    html = """
    <html><head><title> Release  notes </title>
    <style>body { color: red; }</style></head>
    <body><script>var x = "<b>";</script><h1>v2.0</h1><p>Faster   recall.</p></body></html>
    """
    title, text = extract_text(html)
    assert title == "Release notes"
    assert text == "Release notes v2.0 Faster recall."


def test_extract_text_caps_length():
    _, text = extract_text("<p>" + "a" * (MAX_CONTENT_CHARS + 50) + "</p>")
    assert len(text) == MAX_CONTENT_CHARS + 3
    assert text.endswith("...")


@pytest.mark.asyncio
async def test_web_scrape_rejects_relative_url():
    result = await get_tool_handler("web_scrape")(url="/docs/page")
    assert result.startswith("Invalid URL")


def test_format_search_results():
    text = format_results({
        "answer": "Paris.",
        "results": [
            {"title": "France", "url": "https://a.example", "content": "Capital:\n  Paris"},
            {"title": None, "url": "https://b.example", "content": ""},
        ],
    }, max_results=1)
    assert text == "Answer: Paris.\n\nSources:\n1. [France](https://a.example) Capital: Paris"
    assert format_results({}).startswith("No results")


def test_tools_render_in_function_calling_format():
    store = get_tools_for_llm(["memory_store"])[0]
    assert store["function"]["parameters"]["additionalProperties"] is False
    assert get_tool_risk("memory_store") == "write"
    assert get_tool_risk("nonexistent") == "read"
