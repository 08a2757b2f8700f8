"""
Configuration shared by the turn graph and its collaborators.

Centralizes tunables read from the environment (and an optional .env file)
so nodes and tool wrappers can be adjusted without touching graph wiring.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in ("0", "false", "off", "no")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass
class AssistantConfig:
    """
    Configuration for the assistant.

    Attributes:
        model: OpenAI model used for every LLM call
        recursion_limit: Maximum number of graph steps per turn
        slots_file: Optional JSON file the slot store persists to
        search_summary: Summarize web results with the LLM (else bullet list)
        deep_research: Allow the deep-research consent flow
        crawl_max_pages: Pages fetched during deep research
        search_max_results: Results requested from the search API
        http_timeout: Timeout in seconds for outbound HTTP calls
    """

    # LLM configuration
    model: str = "gpt-4.1-mini"
    llm_timeout: int = 60  # seconds

    # Graph execution limits
    recursion_limit: int = 25

    # Persistence
    slots_file: Optional[str] = None

    # Search / research behaviour
    search_summary: bool = True
    deep_research: bool = True
    crawl_max_pages: int = 4
    search_max_results: int = 10

    # Outbound HTTP
    http_timeout: int = 10  # seconds

    @classmethod
    def from_env(cls) -> "AssistantConfig":
        """Build a configuration from VOYANT_* environment variables."""
        return cls(
            model=os.environ.get("VOYANT_MODEL") or cls.model,
            llm_timeout=_env_int("VOYANT_LLM_TIMEOUT", cls.llm_timeout),
            recursion_limit=_env_int("VOYANT_RECURSION_LIMIT", cls.recursion_limit),
            slots_file=os.environ.get("VOYANT_SLOTS_FILE") or None,
            search_summary=_env_flag("VOYANT_SEARCH_SUMMARY", cls.search_summary),
            deep_research=_env_flag("VOYANT_DEEP_RESEARCH", cls.deep_research),
            crawl_max_pages=_env_int("VOYANT_CRAWL_MAX_PAGES", cls.crawl_max_pages),
            search_max_results=_env_int(
                "VOYANT_SEARCH_MAX_RESULTS", cls.search_max_results
            ),
            http_timeout=_env_int("VOYANT_HTTP_TIMEOUT", cls.http_timeout),
        )


# Default configuration instance
DEFAULT_CONFIG = AssistantConfig.from_env()


def get_config(
    model: Optional[str] = None,
    recursion_limit: Optional[int] = None,
    slots_file: Optional[str] = None,
    search_summary: Optional[bool] = None,
    deep_research: Optional[bool] = None,
) -> AssistantConfig:
    """
    Create a configuration with optional overrides.

    Args:
        model: Override for LLM model
        recursion_limit: Override for recursion limit
        slots_file: Override for the slot persistence file
        search_summary: Override for LLM search summaries
        deep_research: Override for the deep research flow

    Returns:
        AssistantConfig with specified overrides applied
    """
    return AssistantConfig(
        model=model or DEFAULT_CONFIG.model,
        llm_timeout=DEFAULT_CONFIG.llm_timeout,
        recursion_limit=recursion_limit or DEFAULT_CONFIG.recursion_limit,
        slots_file=slots_file if slots_file is not None else DEFAULT_CONFIG.slots_file,
        search_summary=search_summary
        if search_summary is not None
        else DEFAULT_CONFIG.search_summary,
        deep_research=deep_research
        if deep_research is not None
        else DEFAULT_CONFIG.deep_research,
        crawl_max_pages=DEFAULT_CONFIG.crawl_max_pages,
        search_max_results=DEFAULT_CONFIG.search_max_results,
        http_timeout=DEFAULT_CONFIG.http_timeout,
    )
