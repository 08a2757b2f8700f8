"""
Tests for the intent router, consent detection, clarifier and search
query optimization.
"""

import json

from voyant.nlp.clarifier import build_clarifying_question, fallback_question
from voyant.nlp.consent import detect_consent, is_context_switch
from voyant.nlp.router import compute_missing_slots, detect_complexity, route_intent
from voyant.nlp.search_query import heuristic_query, optimize_search_query
from voyant.shared.config import DEFAULT_CONFIG


COMPLEX_QUERY = (
    "Plan a 5 day trip from Boston for a family with two kids, budget under $3000, "
    "we don't like crowds"
)


# ============================================================================
# TestRouteIntent
# ============================================================================


class TestRouteIntent:
    """Tests for route_intent."""

    def test_explicit_search(self):
        route = route_intent("Search the web for Lisbon festivals")
        assert route.intent == "web_search"
        assert route.confidence == 0.9

    def test_policy_phrasing(self):
        route = route_intent("Do I need a visa for Japan?")
        assert route.intent == "policy"

    def test_complex_query_requests_deep_research(self):
        route = route_intent(COMPLEX_QUERY)
        assert route.intent == "destinations"
        assert route.slots["deep_research_consent_needed"] == "true"
        assert route.slots["complexity_reasoning"].startswith("Detected")

    def test_complex_query_routed_normally_when_not_allowed(self):
        route = route_intent(COMPLEX_QUERY, allow_deep_research=False)
        assert "deep_research_consent_needed" not in route.slots

    def test_deep_research_flag_off(self, monkeypatch):
        monkeypatch.setattr(DEFAULT_CONFIG, "deep_research", False)
        route = route_intent(COMPLEX_QUERY)
        assert "deep_research_consent_needed" not in route.slots

    def test_llm_route(self, fake_llm):
        fake_llm.add(
            "You route messages",
            json.dumps(
                {"intent": "weather", "confidence": 0.9, "slots": {"city": "Oslo"}, "needExternal": True}
            ),
        )
        route = route_intent("hows oslo looking")

        assert route.intent == "weather"
        assert route.slots == {"city": "Oslo"}
        assert route.missing_slots == []
        assert route.need_external

    def test_low_confidence_llm_falls_back_to_parsers(self, fake_llm):
        fake_llm.add(
            "You route messages",
            json.dumps({"intent": "attractions", "confidence": 0.2, "slots": {}}),
        )
        route = route_intent("What's the weather in Paris in June?")

        assert route.intent == "weather"
        assert route.slots == {"city": "Paris", "dates": "June", "month": "June"}

    def test_parser_fallback_reports_missing(self):
        route = route_intent("What should I pack?")
        assert route.intent == "packing"
        assert route.missing_slots == ["city", "dates"]

    def test_origin_city_not_counted_by_router(self):
        # The route node accepts originCity for destinations; the router does not
        route = route_intent("Recommend destinations for June leaving from Chicago")

        assert route.intent == "destinations"
        assert route.slots["originCity"] == "Chicago"
        assert route.missing_slots == ["city"]

    def test_context_fills_missing(self):
        route = route_intent("What should I pack?", {"city": "Rome", "month": "May"})
        assert route.missing_slots == []
        assert route.slots == {}


class TestComplexity:
    """Tests for detect_complexity and compute_missing_slots."""

    def test_constraints_counted(self):
        assessment = detect_complexity(COMPLEX_QUERY)
        assert assessment.is_complex
        assert set(assessment.constraints) >= {"budget", "travel party", "trip duration", "origin city"}

    def test_simple_query(self):
        assessment = detect_complexity("Weather in Rome with kids")
        assert not assessment.is_complex
        assert assessment.reasoning == ""

    def test_multiple_interests_count_once(self):
        assessment = detect_complexity("Beaches, museums and food for a couple on a budget")
        assert "multiple interests" in assessment.constraints
        assert assessment.is_complex

    def test_missing_slots(self):
        assert compute_missing_slots("destinations", {}) == ["city", "dates"]
        assert compute_missing_slots("weather", {"city": "Rome"}) == []
        assert compute_missing_slots("policy", {}) == []


# ============================================================================
# TestConsent
# ============================================================================


class TestConsent:
    """Tests for detect_consent and is_context_switch."""

    def test_plain_replies_without_llm(self):
        assert detect_consent("Yes") == "yes"
        assert detect_consent("sure!") == "yes"
        assert detect_consent("go ahead") == "yes"
        assert detect_consent("no thanks") == "no"
        assert detect_consent("What about Rome?") == "unclear"

    def test_llm_answer_used(self, fake_llm):
        fake_llm.add("yes/no question", "Yes")
        assert detect_consent("that would be lovely") == "yes"

    def test_llm_unclear_falls_back_to_plain(self, fake_llm):
        fake_llm.add("yes/no question", "unclear")
        assert detect_consent("nope") == "no"

    def test_new_question_is_a_switch(self):
        assert is_context_switch("What is the weather in Tokyo?", COMPLEX_QUERY)

    def test_bare_consent_is_not_a_switch(self):
        assert not is_context_switch("yes", COMPLEX_QUERY)

    def test_statement_is_not_a_switch(self):
        assert not is_context_switch("sounds good to me", COMPLEX_QUERY)

    def test_related_question_is_not_a_switch(self):
        pending = "family trip from Boston budget"
        assert not is_context_switch("what about family trip from Boston", pending)


# ============================================================================
# TestClarifier
# ============================================================================


class TestClarifier:
    """Tests for clarifying questions."""

    def test_fallback_questions(self):
        assert fallback_question(["city", "dates"]) == "Could you share the city and month/dates?"
        assert fallback_question(["dates"]) == "Which month or travel dates?"
        assert fallback_question(["city"]) == "Which city are you asking about?"
        assert fallback_question([]) == "Could you provide more details about your travel plans?"

    def test_llm_question_mentioning_all_slots(self, fake_llm):
        fake_llm.add("missing information", "Which city and dates do you have in mind?")
        assert build_clarifying_question(["city", "dates"]) == "Which city and dates do you have in mind?"

    def test_llm_question_missing_a_slot_rejected(self, fake_llm):
        fake_llm.add("missing information", "Where are you headed?")
        assert build_clarifying_question(["city"]) == "Which city are you asking about?"

    def test_llm_error_text_rejected(self, fake_llm):
        fake_llm.add("missing information", "Sorry, there was an error with the city lookup")
        assert build_clarifying_question(["city"]) == "Which city are you asking about?"


# ============================================================================
# TestSearchQuery
# ============================================================================


class TestSearchQuery:
    """Tests for search query optimization."""

    def test_heuristic_strips_filler_and_adds_city(self):
        query = heuristic_query("Can you search the web for best family hotels?", {"city": "Lisbon"})
        assert query == "best family hotels Lisbon"

    def test_llm_query_used(self, fake_llm):
        fake_llm.add("concise web search query", '"Lisbon family hotels"')
        assert optimize_search_query("hotels for my family in Lisbon please") == "Lisbon family hotels"

    def test_consent_flags_not_sent_to_llm(self, fake_llm):
        fake_llm.add("concise web search query", "flights Boston")
        optimize_search_query("flights", {"city": "Boston", "pending_search_query": "flights"})
        assert "pending_search_query" not in fake_llm.prompts[-1]
