"""
Thin HTTP helper shared by the tool wrappers.

GET requests with a timeout and tenacity retries on connection errors,
timeouts and 5xx/429 responses. Client errors surface immediately as
ToolHTTPError.
"""

import logging
from typing import Any, Dict, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from voyant.shared.config import DEFAULT_CONFIG


logger = logging.getLogger(__name__)

USER_AGENT = "voyant-travel-assistant/0.1"


class ToolHTTPError(Exception):
    """Non-retryable HTTP failure (4xx other than 429, bad payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientHTTPError(Exception):
    """Retryable HTTP failure (429 or 5xx)."""


RETRYABLE = (
    requests.ConnectionError,
    requests.Timeout,
    TransientHTTPError,
)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type(RETRYABLE),
    reraise=True,
)
def _get(url: str, params: Optional[Dict[str, Any]], timeout: float) -> requests.Response:
    response = requests.get(
        url,
        params=params or {},
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        timeout=timeout,
    )
    if response.status_code == 429 or response.status_code >= 500:
        raise TransientHTTPError(f"{url} returned {response.status_code}")
    if response.status_code >= 400:
        raise ToolHTTPError(
            f"{url} returned {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )
    return response


def get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    GET a URL and decode the JSON body.

    Raises:
        ToolHTTPError: On client errors or an undecodable body.
        TransientHTTPError, requests.RequestException: When retries run out.
    """
    response = _get(url, params, timeout or DEFAULT_CONFIG.http_timeout)
    try:
        return response.json()
    except ValueError as e:
        raise ToolHTTPError(f"{url} returned invalid JSON: {e}") from e


def get_text(url: str, timeout: Optional[float] = None) -> str:
    """GET a URL and return the body as text (used by the crawler)."""
    response = requests.get(
        url,
        headers={"User-Agent": USER_AGENT},
        timeout=timeout or DEFAULT_CONFIG.http_timeout,
    )
    if response.status_code >= 400:
        raise ToolHTTPError(f"{url} returned {response.status_code}", status_code=response.status_code)
    return response.text
