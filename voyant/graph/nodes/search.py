"""
Web search and deep research nodes.
"""

import html
import json
import logging
import re
from typing import Any, Dict, List

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import fact, finish, log_prefix, profile_slots
from voyant.nlp.search_query import optimize_search_query
from voyant.prompts.templates import SEARCH_SUMMARIZE_PROMPT
from voyant.shared.config import DEFAULT_CONFIG
from voyant.shared.llm.client import get_llm_response
from voyant.tools import deep_research, tavily_search


logger = logging.getLogger(__name__)

SEARCH_UNAVAILABLE_REPLY = (
    "I'm unable to search the web right now. Could you ask me something about weather, "
    "destinations, packing, or attractions instead?"
)
NO_RESULTS_REPLY = (
    "I couldn't find relevant information for your search. Could you try rephrasing your "
    "question or ask me about weather, destinations, packing, or attractions?"
)
DEEP_RESEARCH_FAILED_REPLY = (
    "I ran into an issue while doing deep research. I can try a standard search instead "
    "if you like."
)

SUMMARY_RESULTS = 7
FALLBACK_RESULTS = 3
MAX_SUMMARY_CHARS = 2000
TRUNCATE_AT = 1900

_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_URL_RE = re.compile(r"https?://")


def clean_summary(text: str) -> str:
    """Strip HTML and keep the summary near 2000 characters, cutting at a sentence."""
    text = _COMMENT_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text).strip()

    if len(text) > MAX_SUMMARY_CHARS:
        cut = text[:TRUNCATE_AT]
        end = max(cut.rfind(". "), cut.rfind(".\n"))
        text = (cut[: end + 1] if end > 0 else cut.rstrip()) + " ..."
    return text


def _sources_block(results: List[tavily_search.SearchResult]) -> str:
    lines = [f"{i}. {r.title or r.url} - {r.url}" for i, r in enumerate(results, start=1) if r.url]
    return "Sources:\n" + "\n".join(lines) if lines else ""


def summarize_results(query: str, results: List[tavily_search.SearchResult]) -> str:
    """LLM summary of the top results, with a Sources block when the summary has no links."""
    top = results[:SUMMARY_RESULTS]
    payload = json.dumps(
        [{"title": r.title, "url": r.url, "description": r.description} for r in top],
        ensure_ascii=False,
    )
    summary = clean_summary(get_llm_response(SEARCH_SUMMARIZE_PROMPT.format(query=query, results=payload)))
    if not summary:
        return ""
    if not _URL_RE.search(summary):
        block = _sources_block(top)
        if block:
            summary = f"{summary}\n\n{block}"
    return summary


def fallback_summary(results: List[tavily_search.SearchResult]) -> str:
    bullets = []
    for r in results[:FALLBACK_RESULTS]:
        description = r.description[:100] + ("..." if len(r.description) > 100 else "")
        bullets.append(f"• {r.title} - {description}")
    return "Based on web search results:\n\n" + "\n".join(bullets) + f"\n\nSources: {tavily_search.SOURCE_NAME}"


def web_search_node(state: TurnState) -> Dict[str, Any]:
    """
    Search the web and summarize the results.

    Uses the query prepared by an earlier node when present, otherwise
    optimizes the user's message.
    """
    _log = log_prefix(state, "web_search")
    query = state.get("search_query") or optimize_search_query(
        state["message"], profile_slots(state.get("slots") or {}), state.get("intent") or "web_search"
    )
    logger.info(f"{_log}Entering node | query={query!r}")

    outcome = tavily_search.search_travel_info(query)
    if not outcome.ok:
        logger.info(f"{_log}Search unavailable ({outcome.reason})")
        return finish(
            "web_search",
            SEARCH_UNAVAILABLE_REPLY,
            decisions=[f"Web search unavailable ({outcome.reason})"],
        )
    if not outcome.results:
        return finish(
            "web_search",
            NO_RESULTS_REPLY,
            decisions=[f"Web search for {query!r} returned no results"],
        )

    reply = ""
    if DEFAULT_CONFIG.search_summary:
        try:
            reply = summarize_results(query, outcome.results)
        except Exception as e:
            logger.debug(f"{_log}Search summary failed, using result list: {e}")
    if not reply:
        reply = fallback_summary(outcome.results)

    top = outcome.results[:FALLBACK_RESULTS]
    return finish(
        "web_search",
        reply,
        citations=[r.url for r in top if r.url],
        facts=[fact(tavily_search.SOURCE_NAME, "search_result", r.title, r.url) for r in top],
        decisions=[f"Answered from web search for {query!r}"],
    )


def deep_research_node(state: TurnState) -> Dict[str, Any]:
    """Run multi-source research for a complex planning query the user agreed to."""
    _log = log_prefix(state, "deep_research")
    query = state.get("pending_deep_research_query") or state["message"]
    logger.info(f"{_log}Entering node | query={query!r}")

    try:
        result = deep_research.perform_deep_research(query)
    except Exception as e:
        logger.warning(f"{_log}Deep research failed: {e}")
        return finish(
            "deep_research",
            DEEP_RESEARCH_FAILED_REPLY,
            decisions=[f"Deep research failed: {e}"],
        )

    reply = result.summary
    if result.citations:
        sources = "\n".join(
            f"{i}. {c.title or c.url} - {c.url}" for i, c in enumerate(result.citations, start=1)
        )
        reply = f"{reply}\n\nSources:\n{sources}"

    return finish(
        "deep_research",
        reply,
        citations=result.sources,
        facts=[fact(c.source, "research_page", c.title or c.url, c.url) for c in result.citations],
        decisions=[f"Deep research over {len(result.pages)} pages"],
    )
