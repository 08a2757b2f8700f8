"""
OpenAI client with retry logic.

Provides a cached client instance and wrappers for LLM calls with
automatic retries using tenacity.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from openai import (
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    OpenAI,
    RateLimitError,
)
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from dotenv import load_dotenv

from voyant.shared.config import DEFAULT_CONFIG
from voyant.shared.llm.response_parser import parse_json_response

load_dotenv()

logger = logging.getLogger(__name__)

# Module-level cache for OpenAI client
_client: Optional[OpenAI] = None

# Errors worth another attempt; everything else surfaces immediately
TRANSIENT_ERRORS = (
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    InternalServerError,
)


def get_cached_client() -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    Uses the OPENAI_API_KEY environment variable for authentication.
    The client is created once and reused for all subsequent calls.
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = OpenAI(api_key=api_key, timeout=DEFAULT_CONFIG.llm_timeout)
    return _client


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)
def call_llm(
    messages: List[Dict[str, str]],
    model: Optional[str] = None,
    client: Optional[OpenAI] = None,
    json_mode: bool = False,
    temperature: float = 0.2,
) -> str:
    """
    Call the OpenAI Chat Completion API with automatic retries.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use (default: configured model)
        client: Optional OpenAI client instance. If not provided, uses cached client.
        json_mode: Request a JSON object response
        temperature: Sampling temperature

    Returns:
        The assistant's response content as a string.

    Raises:
        ValueError: If no API key is configured.
        openai.OpenAIError: If all retry attempts fail.
    """
    if client is None:
        client = get_cached_client()

    kwargs: Dict[str, Any] = {
        "model": model or DEFAULT_CONFIG.model,
        "messages": messages,
        "temperature": temperature,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(**kwargs)

    content = response.choices[0].message.content or ""
    return content.strip()


def get_llm_response(
    user_prompt: str,
    system_prompt: Optional[str] = None,
    model: Optional[str] = None,
    client: Optional[OpenAI] = None,
) -> str:
    """
    Single-prompt convenience wrapper around call_llm.

    Args:
        user_prompt: The user message content
        system_prompt: Optional system message content
        model: Model identifier to use
        client: Optional OpenAI client instance

    Returns:
        The assistant's response content as a string.
    """
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_prompt})
    return call_llm(messages, model=model, client=client)


def get_llm_json(
    user_prompt: str,
    system_prompt: Optional[str] = None,
    model: Optional[str] = None,
    client: Optional[OpenAI] = None,
) -> Dict[str, Any]:
    """
    Call the LLM in JSON mode and parse the reply into a dict.

    Raises:
        ParseError: If the reply holds no JSON object.
    """
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_prompt})
    raw = call_llm(messages, model=model, client=client, json_mode=True)
    logger.debug(f"LLM JSON reply: {raw[:300]}")
    return parse_json_response(raw)
