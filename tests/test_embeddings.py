"""Tests for the OpenAI-compatible embedding provider (no network, httpx.MockTransport)."""

import json

import httpx
import pytest

from omni.memory.embeddings import EmbeddingProvider, OpenAIEmbeddingProvider
from omni.memory.errors import ProviderError


def _provider(handler, api_key="sk-test") -> OpenAIEmbeddingProvider:
    return OpenAIEmbeddingProvider(
        api_key=api_key,
        base_url="https://llm.example.com/v1/",
        model="text-embedding-3-small",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_embed_posts_model_and_input():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}], "usage": {"total_tokens": 4}}
        )

    provider = _provider(handler)
    try:
        vector = await provider.embed("hello world")
    finally:
        await provider.aclose()

    assert vector == [0.1, 0.2, 0.3]
    assert seen["url"] == "https://llm.example.com/v1/embeddings"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {"model": "text-embedding-3-small", "input": "hello world"}


@pytest.mark.asyncio
async def test_missing_api_key_fails_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(ProviderError, match="OPENAI_API_KEY"):
        await _provider(handler, api_key="").embed("text")
    assert calls == []


@pytest.mark.asyncio
async def test_http_error_is_provider_error_and_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429, text="rate limited")

    provider = _provider(handler)
    with pytest.raises(ProviderError, match="HTTP 429: rate limited"):
        await provider.embed("text")
    assert len(calls) == 1
    await provider.aclose()


@pytest.mark.asyncio
async def test_timeout_is_provider_error():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    provider = _provider(handler)
    with pytest.raises(ProviderError, match="timed out"):
        await provider.embed("text")
    await provider.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{}, {"data": []}, {"data": [{"index": 0}]}, {"data": [{"embedding": []}]}],
)
async def test_malformed_payload_is_provider_error(payload):
    provider = _provider(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(ProviderError):
        await provider.embed("text")
    await provider.aclose()


@pytest.mark.asyncio
async def test_client_is_reused_until_closed():
    provider = _provider(
        lambda request: httpx.Response(200, json={"data": [{"embedding": [1.0]}]})
    )
    await provider.embed("a")
    first = provider._client
    await provider.embed("b")
    assert provider._client is first

    await provider.aclose()
    assert provider._client is None


def test_provider_interface_is_abstract():
    with pytest.raises(TypeError):
        EmbeddingProvider()
