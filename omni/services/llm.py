"""
Chat completions for the agent layer (OpenAI-compatible /chat/completions).

Rate limits and 5xx are retried with exponential backoff, honouring
Retry-After. Timeouts are retried too. Embeddings never go through here:
the memory core has its own provider and does not retry.
"""

import asyncio
import logging
import random
import time
from typing import Any, Optional

import httpx

from ..core.config import get_settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
MAX_RETRIES = 3
BASE_DELAY = 1.0
MAX_DELAY = 16.0

CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD_TOKENS = 4


class LLMError(RuntimeError):
    """The completion request failed for good (non-retryable or out of retries)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10, read=120, write=30, pool=10),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _client


async def close_client() -> None:
    """Shutdown hook."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
    _client = None


def _backoff(attempt: int, retry_after: Optional[str] = None) -> float:
    if retry_after:
        try:
            return min(MAX_DELAY, float(retry_after))
        except ValueError:
            pass
    return min(MAX_DELAY, BASE_DELAY * 2 ** attempt + random.uniform(0, 1))


async def _post_with_retry(url: str, payload: dict, headers: dict) -> dict:
    client = _get_client()
    failure = "no attempt made"

    for attempt in range(MAX_RETRIES + 1):
        last = attempt == MAX_RETRIES
        try:
            resp = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            failure = f"timed out ({type(e).__name__})"
            delay = _backoff(attempt)
        else:
            if resp.status_code < 400:
                return resp.json()
            if resp.status_code not in RETRYABLE_STATUS:
                logger.error("LLM API error %d: %s", resp.status_code, resp.text[:500])
                raise LLMError(
                    f"LLM API returned HTTP {resp.status_code}: {resp.text[:200]}",
                    status_code=resp.status_code,
                )
            failure = f"HTTP {resp.status_code}"
            delay = _backoff(attempt, resp.headers.get("retry-after"))

        if last:
            break
        logger.warning(
            "LLM %s (attempt %d/%d), retrying in %.1fs",
            failure, attempt + 1, MAX_RETRIES + 1, delay,
        )
        await asyncio.sleep(delay)

    raise LLMError(f"LLM request failed after {MAX_RETRIES + 1} attempts: {failure}")


async def chat(
    messages: list[dict],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    tools: Optional[list[dict]] = None,
    tool_choice: Optional[str] = None,
) -> dict:
    """One completion. Returns the raw response body."""
    settings = get_settings()
    if not settings.openai_api_key:
        raise LLMError("no LLM API key configured (set OPENAI_API_KEY)")

    payload: dict[str, Any] = {
        "model": model or settings.default_llm_model,
        "messages": messages,
        "temperature": settings.default_llm_temperature if temperature is None else temperature,
        "max_tokens": max_tokens or settings.default_llm_max_tokens,
    }
    if tools:
        payload["tools"] = tools
        payload["parallel_tool_calls"] = True
        if tool_choice:
            payload["tool_choice"] = tool_choice

    start = time.monotonic()
    try:
        data = await _post_with_retry(
            f"{settings.openai_base_url.rstrip('/')}/chat/completions",
            payload,
            {"Authorization": f"Bearer {settings.openai_api_key}"},
        )
    except LLMError as e:
        logger.error("LLM failed after %.1fs: %s", time.monotonic() - start, e)
        raise

    usage = data.get("usage") or {}
    message = (data.get("choices") or [{}])[0].get("message") or {}
    logger.info(
        "LLM %s %dms | in=%d out=%d | model=%s",
        "tool_call" if message.get("tool_calls") else "reply",
        int((time.monotonic() - start) * 1000),
        usage.get("prompt_tokens", 0),
        usage.get("completion_tokens", 0),
        payload["model"],
    )
    return data


def estimate_tokens(text: str) -> int:
    """Rough count, ~4 characters per token."""
    return max(1, len(text) // CHARS_PER_TOKEN)


def estimate_messages_tokens(messages: list[dict]) -> int:
    total = 2
    for msg in messages:
        total += MESSAGE_OVERHEAD_TOKENS
        content = msg.get("content")
        if isinstance(content, str) and content:
            total += estimate_tokens(content)
        for call in msg.get("tool_calls") or []:
            total += estimate_tokens(call.get("function", {}).get("arguments") or "")
    return total
