"""
Tests for the internal policy knowledge base.
"""

import pytest

from voyant.tools.policy_kb import (
    NO_ANSWER,
    answer_policy_question,
    load_sections,
    parse_policy_document,
    search_policies,
)


SAMPLE_DOCUMENT = """# Pet Policy
Source: https://example.com/pets

Intro text before any section is ignored.

## Cabin pets
Small cats and dogs may travel in the cabin
in a soft carrier.

## Empty section

## Service animals
Trained service dogs travel free of charge.
"""


class TestParsing:
    """Tests for parse_policy_document and load_sections."""

    def test_sections_split_on_headings(self):
        sections = parse_policy_document(SAMPLE_DOCUMENT)

        assert [s.heading for s in sections] == ["Cabin pets", "Service animals"]
        assert sections[0].title == "Pet Policy"
        assert sections[0].url == "https://example.com/pets"
        assert sections[0].text == "Small cats and dogs may travel in the cabin in a soft carrier."

    def test_document_without_title_or_source(self):
        sections = parse_policy_document("## Only\nSome text.")
        assert sections[0].title == "Policy"
        assert sections[0].url is None

    def test_bundled_documents_load(self):
        titles = {s.title for s in load_sections()}
        assert {"Baggage Policy", "Visas and Passports"} <= titles


class TestSearch:
    """Tests for search_policies."""

    def test_best_section_first(self):
        sections = search_policies("What is the carry-on baggage allowance?")
        assert sections[0].heading == "Carry-on allowance"
        assert len(sections) <= 3

    def test_visa_question(self):
        headings = [s.heading for s in search_policies("How long can I stay in the Schengen area without a visa?")]
        assert "Schengen short stays" in headings

    def test_unrelated_question_finds_nothing(self):
        assert search_policies("Tell me about penguins in Antarctica") == []

    def test_stopwords_only(self):
        assert search_policies("what do you have?") == []


class TestAnswer:
    """Tests for answer_policy_question."""

    def test_answer_with_citations(self, fake_llm):
        fake_llm.add("Answer the traveler's policy question", "One carry-on up to 8 kg [1].")
        result = answer_policy_question("What is the carry-on baggage allowance?")

        assert result.answer == "One carry-on up to 8 kg [1]."
        assert result.citations[0].title == "Baggage Policy: Carry-on allowance"
        assert result.citations[0].url == "https://voyant.travel/policies/baggage"

    def test_no_answer_marker(self, fake_llm):
        fake_llm.add("Answer the traveler's policy question", NO_ANSWER)
        result = answer_policy_question("What is the carry-on baggage allowance?")

        assert result.answer == ""
        assert result.citations == []

    def test_no_matching_sections_skips_llm(self, fake_llm):
        result = answer_policy_question("Tell me about penguins in Antarctica")

        assert result.citations == []
        assert fake_llm.prompts == []

    def test_llm_failure_propagates(self):
        with pytest.raises(RuntimeError):
            answer_policy_question("What is the carry-on baggage allowance?")
