"""
Web search through Tavily. Registered only when FF_USE_WEB_SEARCH is on.
"""

import logging

import httpx

from ..core.config import get_settings
from .registry import tool, ToolRisk

logger = logging.getLogger(__name__)

TAVILY_URL = "https://api.tavily.com/search"
DEFAULT_RESULTS = 5
MAX_RESULTS = 10
SNIPPET_CHARS = 300


def format_results(data: dict, max_results: int = DEFAULT_RESULTS) -> str:
    """Tavily response -> answer line plus a markdown source list."""
    lines = []
    if data.get("answer"):
        lines.append(f"Answer: {data['answer']}")

    results = (data.get("results") or [])[:max_results]
    if results:
        lines.append("")
        lines.append("Sources:")
    for n, item in enumerate(results, 1):
        snippet = " ".join((item.get("content") or "").split())[:SNIPPET_CHARS]
        lines.append(f"{n}. [{item.get('title') or 'Untitled'}]({item.get('url', '')}) {snippet}")

    return "\n".join(lines).strip() or "No results. Try broader or different keywords."


@tool(
    name="web_search",
    description=(
        "Search the web for current information. Returns a short answer and "
        "numbered sources (title, URL, snippet). "
        "\n\nUse for recent events, facts you're unsure about, documentation, "
        "people, companies, prices. Start with a short query (2-6 words) and "
        "follow up with web_scrape on the best source for its full text. "
        "Cite the sources you use."
    ),
    parameters={
        "properties": {
            "query": {"type": "string", "description": "Short search query"},
            "max_results": {
                "type": "integer", "minimum": 1, "maximum": MAX_RESULTS,
                "description": f"Sources to return (default {DEFAULT_RESULTS})",
            },
        },
        "required": ["query"],
    },
    risk=ToolRisk.EXTERNAL,
    category="data",
)
async def web_search(query: str, max_results: int = DEFAULT_RESULTS, **kwargs) -> str:
    api_key = get_settings().tavily_api_key
    if not api_key:
        return (
            "Web search is unavailable (TAVILY_API_KEY is not set). "
            "Answer from your own knowledge and say so."
        )

    max_results = max(1, min(MAX_RESULTS, int(max_results)))
    logger.info("Web search: '%s' (max %d)", query[:80], max_results)
    try:
        async with httpx.AsyncClient(timeout=15) as client:
            resp = await client.post(
                TAVILY_URL,
                json={
                    "api_key": api_key,
                    "query": query,
                    "max_results": max_results,
                    "include_answer": True,
                },
            )
            resp.raise_for_status()
            data = resp.json()
    except httpx.TimeoutException:
        return "Web search timed out. Retry with a shorter query."
    except httpx.HTTPStatusError as e:
        logger.warning("Tavily returned HTTP %d", e.response.status_code)
        return f"Web search failed (HTTP {e.response.status_code}). Retry or rephrase."
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Web search error: %s", e)
        return f"Web search failed: {e}"

    return format_results(data, max_results)
