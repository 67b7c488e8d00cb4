"""HTTP API tests against a temp SQLite database with a fake embedder and mocked LLM."""

import pytest
from fastapi.testclient import TestClient

from omni.core.config import Settings
from omni.factory import create_app

from conftest import DIMS, FakeEmbedder


@pytest.fixture
def client(tmp_path):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        embedding_dimensions=DIMS,
        openai_api_key="",
    )
    app = create_app(settings=settings, embedder=FakeEmbedder())
    with TestClient(app) as client:
        yield client


def _answer(text):
    async def fake_chat(messages, **kwargs):
        return {"choices": [{"message": {"role": "assistant", "content": text}}], "usage": {}}
    return fake_chat


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "omni"}


def test_store_and_search_use_camel_case(client):
    stored = client.post("/v1/memories", json={
        "content": "Quarterly report is due on Friday",
        "category": "personal",
        "priority": "high",
        "tags": ["deadline"],
        "ownerAgent": "personal",
    })
    assert stored.status_code == 200
    body = stored.json()
    assert body["success"] is True
    assert body["embeddingDimensions"] == DIMS
    assert body["message"] == f"Memory stored with ID {body['id']}"

    found = client.post("/v1/memories/search", json={
        "query": "Quarterly report is due on Friday",
        "ownerAgent": "personal",
        "minSimilarity": 0.9,
    }).json()
    assert found["success"] is True
    assert found["totalFound"] == 1
    assert found["strategy"] == "scan"
    hit = found["results"][0]
    assert hit["ownerAgent"] == "personal"
    assert hit["tags"] == ["deadline"]
    assert hit["similarity"] == 1.0


def test_invalid_category_is_a_failed_envelope(client):
    resp = client.post("/v1/memories", json={"content": "x", "category": "shopping"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["message"].startswith("Failed to store memory: category 'shopping'")


def test_missing_content_is_rejected(client):
    assert client.post("/v1/memories", json={"category": "general"}).status_code == 422


def test_search_limit_out_of_range(client):
    body = client.post("/v1/memories/search", json={"query": "anything", "limit": 50}).json()
    assert body["success"] is False
    assert body["message"].startswith("Search failed: limit must be between 1 and 20")


def test_stats(client):
    client.post("/v1/memories", json={"content": "one", "category": "coding", "ownerAgent": "coding"})
    client.post("/v1/memories", json={"content": "two", "category": "coding"})
    client.post("/v1/memories", json={"content": "three"})

    stats = client.get("/v1/memories/stats").json()
    assert stats["total"] == 3
    assert stats["by_category"] == {"coding": 2, "general": 1}
    assert stats["by_owner_agent"] == {"coding": 1, "unknown": 2}
    assert stats["oldest"] is not None


def test_chat_and_conversation_detail(client, monkeypatch):
    monkeypatch.setattr("omni.services.llm.chat", _answer("Hello! How can I help?"))

    resp = client.post("/v1/chat", json={"message": "Hi Omni", "session_id": "web-1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["content"] == "Hello! How can I help?"
    assert body["agent"] == "omni"
    assert body["session_id"] == "web-1"

    detail = client.get("/v1/conversations/web-1").json()
    assert detail["title"] == "Hi Omni"
    assert detail["last_agent"] == "omni"
    assert [m["role"] for m in detail["messages"]] == ["user", "assistant"]

    listed = client.get("/v1/conversations").json()
    assert [c["session_id"] for c in listed] == ["web-1"]

    assert client.delete("/v1/conversations/web-1").json() == {"deleted": True, "session_id": "web-1"}
    assert client.get("/v1/conversations/web-1").status_code == 404


def test_chat_with_named_specialist(client, monkeypatch):
    monkeypatch.setattr("omni.services.llm.chat", _answer("def f(): pass"))
    body = client.post("/v1/chat", json={"message": "stub", "session_id": "s", "agent": "coding"}).json()
    assert body["agent"] == "coding"


def test_chat_unknown_agent(client):
    resp = client.post("/v1/chat", json={"message": "hi", "session_id": "s", "agent": "nobody"})
    assert resp.status_code == 404
    assert "Unknown agent 'nobody'" in resp.json()["detail"]


def test_chat_requires_message(client):
    assert client.post("/v1/chat", json={"message": "", "session_id": "s"}).status_code == 422


def test_unknown_conversation(client):
    assert client.get("/v1/conversations/missing").status_code == 404


def test_list_agents(client):
    agents = client.get("/v1/agents").json()
    names = [a["name"] for a in agents]
    assert names[0] == "omni"
    assert "research" in names
