"""
Page crawler for deep research.

Fetches pages with requests and extracts the main readable text with
BeautifulSoup.
"""

import logging
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup
from pydantic import BaseModel

from voyant.shared.config import DEFAULT_CONFIG
from voyant.tools.http import ToolHTTPError, get_text


logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 100
MAX_CONTENT_CHARS = 2000

_NOISE_SELECTORS = "script, style, nav, header, footer, aside, noscript, .ad, .advertisement, .sidebar"
_MAIN_SELECTORS = ["main", "article", ".content", ".post", ".entry", ".main-content"]


class CrawledPage(BaseModel):
    url: str
    title: str = ""
    content: str


def extract_main_content(html: str) -> Tuple[str, str]:
    """
    Return ``(title, text)`` for an HTML document.

    Navigation, ads and scripts are dropped; the first main-content
    container with more than 200 characters wins, else the whole body.
    """
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""

    for element in soup.select(_NOISE_SELECTORS):
        element.decompose()

    for selector in _MAIN_SELECTORS:
        main = soup.select_one(selector)
        if main is not None:
            text = " ".join(main.get_text(" ", strip=True).split())
            if len(text) > 200:
                return title, text

    body = soup.body or soup
    return title, " ".join(body.get_text(" ", strip=True).split())


def fetch_page(url: str) -> Optional[CrawledPage]:
    """Fetch one page; None when it fails or has too little text."""
    try:
        html = get_text(url)
    except (ToolHTTPError, requests.RequestException) as e:
        logger.warning(f"Failed to crawl {url}: {e}")
        return None

    title, content = extract_main_content(html)
    logger.info(f"Crawled {url} | title={title[:80]!r}, chars={len(content)}")
    if len(content) <= MIN_CONTENT_CHARS:
        logger.info(f"Content too short, skipping {url}")
        return None
    return CrawledPage(url=url, title=title, content=content[:MAX_CONTENT_CHARS])


def crawl_pages(urls: List[str], max_pages: Optional[int] = None) -> List[CrawledPage]:
    """Crawl up to ``max_pages`` URLs in order, skipping failures."""
    limit = min(len(urls), max_pages or DEFAULT_CONFIG.crawl_max_pages)
    pages = []
    for url in urls[:limit]:
        page = fetch_page(url)
        if page is not None:
            pages.append(page)
    return pages
