"""
Web search via the Tavily API.

Returns a SearchOutcome instead of raising for expected failures (no key,
empty query, auth or rate-limit errors) so graph nodes can pick a fallback.
"""

import logging
import os
from typing import List, Optional

from pydantic import BaseModel, Field
from tavily import TavilyClient
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from voyant.shared.config import DEFAULT_CONFIG


logger = logging.getLogger(__name__)

SOURCE_NAME = "Tavily"


class SearchResult(BaseModel):
    title: str = ""
    url: str = ""
    description: str = ""


class SearchOutcome(BaseModel):
    ok: bool
    results: List[SearchResult] = Field(default_factory=list)
    answer: Optional[str] = None
    reason: Optional[str] = None


def _classify_error(error: Exception) -> str:
    message = str(error).lower()
    if "401" in message or "403" in message or "unauthorized" in message or "invalid api key" in message:
        return "auth_error"
    if "429" in message or "rate" in message:
        return "rate_limited"
    if "timeout" in message or "timed out" in message:
        return "timeout"
    if "network" in message or "connection" in message:
        return "network"
    return "unknown_error"


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, Exception) and _classify_error(error) in ("timeout", "network")


def get_client() -> Optional[TavilyClient]:
    api_key = os.environ.get("TAVILY_API_KEY")
    if not api_key:
        return None
    return TavilyClient(api_key=api_key)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception(_is_transient),
    reraise=True,
)
def _search(client: TavilyClient, query: str, max_results: int) -> dict:
    return client.search(
        query,
        search_depth="advanced",
        include_answer=True,
        include_images=False,
        max_results=max_results,
    )


def search_travel_info(query: str, max_results: Optional[int] = None) -> SearchOutcome:
    """
    Search the web for travel information.

    Args:
        query: Search query text
        max_results: Result cap (default: configured VOYANT_SEARCH_MAX_RESULTS)

    Returns:
        SearchOutcome with normalized results, or ok=False and a reason
        (no_query, no_api_key, auth_error, rate_limited, timeout, network,
        unknown_error).
    """
    if not query or not query.strip():
        return SearchOutcome(ok=False, reason="no_query")

    client = get_client()
    if client is None:
        logger.info("Tavily search skipped: TAVILY_API_KEY is not set")
        return SearchOutcome(ok=False, reason="no_api_key")

    limit = max_results or DEFAULT_CONFIG.search_max_results
    try:
        response = _search(client, query.strip(), limit)
    except Exception as e:
        reason = _classify_error(e)
        logger.warning(f"Tavily search failed ({reason}) for {query!r}: {e}")
        return SearchOutcome(ok=False, reason=reason)

    results = [
        SearchResult(
            title=r.get("title") or "",
            url=r.get("url") or "",
            description=r.get("content") or "",
        )
        for r in (response or {}).get("results", [])
    ]
    answer = ((response or {}).get("answer") or "").strip() or None
    logger.info(f"Tavily search returned {len(results)} results for {query!r}")
    return SearchOutcome(ok=True, results=results, answer=answer)
