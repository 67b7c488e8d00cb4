"""
Central feature flags. One file controls every optional dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the system uses a local fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Semantic recall ──────────────────────────────────────────────
    use_vector_index: bool = Field(default=True, alias="FF_USE_VECTOR_INDEX")
    # ON  → store-ranked: PostgreSQL ranks with pgvector `<=>` (cosine distance).
    #       Needs the `vector` extension. Bounded by LIMIT, no vectors leave the DB.
    # OFF → scan-ranked: newest MEMORY_SCAN_WINDOW rows pulled into the process,
    #       cosine computed with numpy. Works on SQLite. Recall capped by the window.

    # ── Web Search ───────────────────────────────────────────────────
    use_web_search: bool = Field(default=True, alias="FF_USE_WEB_SEARCH")
    # ON  → research agent can call Tavily search. Needs TAVILY_API_KEY.
    # OFF → Search tool not registered. Agent uses its own knowledge + web_scrape.

    # ── Agents ───────────────────────────────────────────────────────
    enable_research_agent: bool = Field(default=True, alias="FF_ENABLE_RESEARCH_AGENT")
    enable_email_agent: bool = Field(default=True, alias="FF_ENABLE_EMAIL_AGENT")
    enable_coding_agent: bool = Field(default=True, alias="FF_ENABLE_CODING_AGENT")
    enable_personal_agent: bool = Field(default=True, alias="FF_ENABLE_PERSONAL_AGENT")
    # The coordinator (omni) is always registered.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
