"""Search query optimization."""

import json
import logging
import re
from typing import Dict, Optional

from voyant.shared.llm.client import get_llm_response
from voyant.prompts.templates import SEARCH_QUERY_OPTIMIZER_PROMPT


logger = logging.getLogger(__name__)

MAX_QUERY_WORDS = 12

_FILLER_RE = re.compile(
    r"\b(please|can you|could you|would you|search the web for|search the web"
    r"|search online for|search for|look up online|look up|google|tell me|i want to know"
    r"|i'd like to know)\b",
    re.IGNORECASE,
)


def heuristic_query(query: str, context: Optional[Dict[str, str]] = None) -> str:
    """Strip filler phrases and append the known city when it is absent."""
    cleaned = _FILLER_RE.sub(" ", query)
    cleaned = re.sub(r"[?!]+", " ", cleaned)
    cleaned = " ".join(cleaned.split())
    city = (context or {}).get("city")
    if city and city.lower() not in cleaned.lower():
        cleaned = f"{cleaned} {city}".strip()
    words = cleaned.split()
    return " ".join(words[:MAX_QUERY_WORDS]) or query.strip()


def optimize_search_query(
    query: str,
    context: Optional[Dict[str, str]] = None,
    intent: str = "web_search",
) -> str:
    """
    Rewrite a request as a concise search query.

    Falls back to filler stripping when the LLM is unavailable or replies
    with something unusable.
    """
    context = {k: v for k, v in (context or {}).items() if not k.startswith(("awaiting_", "pending_"))}
    try:
        optimized = get_llm_response(
            SEARCH_QUERY_OPTIMIZER_PROMPT.format(
                query=query, context=json.dumps(context), intent=intent
            )
        ).strip().strip('"').strip()
        if optimized and len(optimized.split()) <= MAX_QUERY_WORDS * 2:
            logger.debug(f"Optimized search query: {query!r} -> {optimized!r}")
            return optimized
    except Exception as e:
        logger.debug(f"Search query optimizer failed: {e}")
    return heuristic_query(query, context)
