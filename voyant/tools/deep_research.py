"""
Deep research for complex planning queries.

Splits the request into focused searches, crawls the top pages, summarizes
each page against the request, and merges the page summaries into one
answer.
"""

import logging
from typing import List

from pydantic import BaseModel, Field

from voyant.shared.config import DEFAULT_CONFIG
from voyant.shared.llm.client import get_llm_json, get_llm_response
from voyant.tools import crawler, tavily_search
from voyant.prompts.templates import (
    DEEP_RESEARCH_QUERIES_PROMPT,
    OVERALL_SUMMARY_PROMPT,
    PAGE_SUMMARY_PROMPT,
)


logger = logging.getLogger(__name__)

MAX_QUERIES = 3
PAGE_PROMPT_CHARS = 16000


class DeepResearchError(Exception):
    """Raised when deep research cannot produce any answer."""


class ResearchCitation(BaseModel):
    source: str
    url: str
    title: str = ""


class ResearchPage(BaseModel):
    url: str
    title: str = ""
    content: str
    summary: str = ""


class DeepResearchResult(BaseModel):
    query: str
    summary: str
    pages: List[ResearchPage] = Field(default_factory=list)
    citations: List[ResearchCitation] = Field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        return [c.url for c in self.citations]


class _Queries(BaseModel):
    queries: List[str]


def generate_queries(query: str, max_queries: int = MAX_QUERIES) -> List[str]:
    """Break a request into focused search queries; the request itself on failure."""
    try:
        data = get_llm_json(DEEP_RESEARCH_QUERIES_PROMPT.format(query=query, max_queries=max_queries))
        queries = [q.strip() for q in _Queries.model_validate(data).queries if q.strip()]
        if queries:
            return queries[:max_queries]
    except Exception as e:
        logger.debug(f"Query generation failed, using the request as-is: {e}")
    return [query]


def summarize_page(content: str, query: str) -> str:
    try:
        return get_llm_response(
            PAGE_SUMMARY_PROMPT.format(query=query, content=content[:PAGE_PROMPT_CHARS])
        ).strip()
    except Exception as e:
        logger.warning(f"Page summary failed: {e}")
        return "Summary unavailable"


def create_overall_summary(pages: List[ResearchPage], query: str) -> str:
    summaries = "\n".join(f"[{i + 1}] {p.title or p.url}: {p.summary}" for i, p in enumerate(pages))
    try:
        return get_llm_response(OVERALL_SUMMARY_PROMPT.format(query=query, summaries=summaries)).strip()
    except Exception as e:
        logger.warning(f"Overall summary failed, joining page summaries: {e}")
        return f"Here is what I found for: {query}\n\n{summaries}"


def _collect_results(queries: List[str]) -> List[tavily_search.SearchResult]:
    seen = set()
    collected = []
    failures = []
    for q in queries:
        outcome = tavily_search.search_travel_info(q)
        if not outcome.ok:
            failures.append(outcome.reason)
            continue
        for result in outcome.results:
            if result.url and result.url not in seen:
                seen.add(result.url)
                collected.append(result)
    if not collected and failures:
        raise DeepResearchError(f"Search failed: {', '.join(str(f) for f in failures)}")
    return collected


def perform_deep_research(query: str) -> DeepResearchResult:
    """
    Research a complex request across several sources.

    Raises:
        DeepResearchError: When no search results could be obtained.
    """
    queries = generate_queries(query)
    logger.info(f"Deep research | query={query!r}, sub_queries={queries}")

    results = _collect_results(queries)
    if not results:
        raise DeepResearchError("No search results")

    crawled = crawler.crawl_pages([r.url for r in results], DEFAULT_CONFIG.crawl_max_pages)
    if crawled:
        pages = [ResearchPage(url=p.url, title=p.title, content=p.content) for p in crawled]
    else:
        logger.info("No pages crawled, researching from search snippets")
        pages = [
            ResearchPage(url=r.url, title=r.title, content=r.description)
            for r in results[: DEFAULT_CONFIG.crawl_max_pages]
            if r.description
        ]
    if not pages:
        raise DeepResearchError("No page content")

    for page in pages:
        page.summary = summarize_page(page.content, query)

    summary = create_overall_summary(pages, query)
    citations = [
        ResearchCitation(source=tavily_search.SOURCE_NAME, url=p.url, title=p.title)
        for p in pages
    ]
    logger.info(f"Deep research complete | pages={len(pages)}, summary_chars={len(summary)}")
    return DeepResearchResult(query=query, summary=summary, pages=pages, citations=citations)
