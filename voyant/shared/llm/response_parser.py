"""
Response parsing helpers for LLM output.

Handles extraction of JSON from the formats models actually return
(raw JSON, markdown code blocks, JSON wrapped in prose).
"""

import json
import re
from typing import Any, Dict


class ParseError(Exception):
    """Raised when response parsing fails."""

    pass


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from LLM response.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON object embedded in surrounding prose

    Args:
        raw_response: Raw LLM response string

    Returns:
        Cleaned JSON string ready for parsing
    """
    content = (raw_response or "").strip()

    # Try to extract from markdown code block
    code_block_pattern = r"```(?:json)?\s*([\s\S]*?)```"
    match = re.search(code_block_pattern, content)
    if match:
        content = match.group(1).strip()

    # Skip any leading prose up to the first brace
    if not content.startswith("{"):
        start = content.find("{")
        if start == -1:
            return content
        content = content[start:]

    # Find matching closing brace
    brace_count = 0
    in_string = False
    escaped = False
    for i, char in enumerate(content):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            brace_count += 1
        elif char == "}":
            brace_count -= 1
            if brace_count == 0:
                return content[: i + 1]

    # If we can't find clear boundaries, return as-is and let JSON parser handle it
    return content


def parse_json_response(raw_response: str) -> Dict[str, Any]:
    """
    Parse an LLM reply into a JSON object.

    Raises:
        ParseError: If no JSON object can be decoded.
    """
    cleaned = extract_json_from_response(raw_response)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in LLM response: {e}") from e

    if not isinstance(parsed, dict):
        raise ParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
