"""
Tests for LLM response parsing.
"""

import pytest

from voyant.shared.llm.response_parser import (
    ParseError,
    extract_json_from_response,
    parse_json_response,
)


class TestExtractJson:
    """Tests for extract_json_from_response."""

    def test_raw_json(self):
        assert extract_json_from_response('{"intent": "weather"}') == '{"intent": "weather"}'

    def test_markdown_code_block(self):
        raw = 'Here you go:\n```json\n{"intent": "packing"}\n```'
        assert extract_json_from_response(raw) == '{"intent": "packing"}'

    def test_prose_around_object(self):
        raw = 'Sure! {"city": "Rome", "slots": {"month": "May"}} Hope that helps.'
        assert extract_json_from_response(raw) == '{"city": "Rome", "slots": {"month": "May"}}'

    def test_braces_inside_strings(self):
        raw = '{"reason": "use {city} here"} trailing'
        assert extract_json_from_response(raw) == '{"reason": "use {city} here"}'

    def test_no_object(self):
        assert extract_json_from_response("no json here") == "no json here"


class TestParseJson:
    """Tests for parse_json_response."""

    def test_object_parsed(self):
        assert parse_json_response('```\n{"confidence": 0.8}\n```') == {"confidence": 0.8}

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_json_response("{not json}")

    def test_non_object(self):
        with pytest.raises(ParseError):
            parse_json_response("[1, 2, 3]")

    def test_none_input(self):
        with pytest.raises(ParseError):
            parse_json_response(None)
