"""LLM client and response parsing utilities."""

from voyant.shared.llm.client import get_cached_client, call_llm, get_llm_json
from voyant.shared.llm.response_parser import ParseError, parse_json_response

__all__ = [
    "get_cached_client",
    "call_llm",
    "get_llm_json",
    "ParseError",
    "parse_json_response",
]
