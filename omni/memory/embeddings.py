"""
Embedding provider. Text in, fixed-length vector out.

OpenAI-compatible /embeddings endpoint over a reusable httpx client.
No retries: a failed call surfaces as ProviderError so the caller sees
the latency and the failure.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .errors import ProviderError

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    model: str = ""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Text in, vector of the provider's fixed length out. Failures raise ProviderError."""

    async def aclose(self) -> None:
        pass


class OpenAIEmbeddingProvider(EmbeddingProvider):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "text-embedding-3-small",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def embed(self, text: str) -> list[float]:
        if not self.api_key:
            raise ProviderError("no embedding API key configured (set OPENAI_API_KEY)")

        start = time.monotonic()
        try:
            resp = await self._get_client().post(
                f"{self.base_url}/embeddings",
                json={"model": self.model, "input": text},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            raise ProviderError(f"embedding request timed out ({type(e).__name__})") from e
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise ProviderError(
                f"embedding API returned HTTP {e.response.status_code}: {body}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"embedding request failed: {e}") from e

        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("embedding API response had no data[0].embedding") from e

        if not isinstance(vector, list) or not vector:
            raise ProviderError("embedding API returned an empty vector")

        usage = data.get("usage", {})
        logger.debug(
            "Embedding %dms | dims=%d tokens=%d model=%s",
            int((time.monotonic() - start) * 1000),
            len(vector),
            usage.get("total_tokens", 0),
            self.model,
        )
        return [float(x) for x in vector]
