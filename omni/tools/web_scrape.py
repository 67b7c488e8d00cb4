"""
Web scrape tool. Fetches a page and returns its visible text.
Regex stripping, no HTML parser. Good enough for articles and docs.
"""

import logging
import re

import httpx

from .registry import tool, ToolRisk

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 5000

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)


def extract_text(html: str) -> tuple[str, str]:
    """Returns (title, text). Text is capped at MAX_CONTENT_CHARS."""
    match = _TITLE_RE.search(html)
    title = _SPACE_RE.sub(" ", match.group(1)).strip() if match else ""

    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _SPACE_RE.sub(" ", text).strip()

    if len(text) > MAX_CONTENT_CHARS:
        text = text[:MAX_CONTENT_CHARS] + "..."
    return title, text


@tool(
    name="web_scrape",
    description=(
        "Fetch a web page and return its title and visible text (scripts and "
        "styles removed, max 5000 characters). "
        "\n\nWhen to use: you have a specific URL (from web_search or the user) "
        "and need its contents. "
        "\n\nReturns: Title, URL, and page text."
    ),
    parameters={
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "Absolute http(s) URL of the page"},
        },
        "required": ["url"],
    },
    risk=ToolRisk.EXTERNAL,
    category="data",
)
async def web_scrape(url: str, **kwargs) -> str:
    if not url.startswith(("http://", "https://")):
        return f"Invalid URL '{url}'. Provide an absolute http(s) URL."

    logger.info("Scraping %s", url)
    try:
        async with httpx.AsyncClient(timeout=15, follow_redirects=True) as client:
            resp = await client.get(url, headers={"User-Agent": "omni-agent/1.0"})
            resp.raise_for_status()
            html = resp.text
    except httpx.TimeoutException:
        return f"Fetching {url} timed out. Try another source."
    except httpx.HTTPStatusError as e:
        return f"Fetching {url} failed (HTTP {e.response.status_code})."
    except httpx.HTTPError as e:
        return f"Fetching {url} failed: {e}"

    title, text = extract_text(html)
    if not text:
        return f"No readable text found at {url}."

    logger.info("Scraped %s: %d chars", url, len(text))
    return f"Title: {title or 'Untitled'}\nURL: {url}\n\n{text}"
