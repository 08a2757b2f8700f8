"""
End-to-end tests for the turn graph.

Messages go through handle_chat with the tool wrappers replaced by fakes,
so these cover routing, slot memory across turns, the consent handshakes
and the receipts behind each reply.
"""

import json

import pytest

from voyant.graph.nodes.common import (
    BUDGET_DISCLAIMER,
    DAY_TRIP_NOTE,
    IDENTITY_REPLY,
    LANGUAGE_WARNING,
    TRAVEL_FOCUS_REPLY,
)
from voyant.graph.nodes.policy import NO_RESULTS_REPLY as POLICY_NO_RESULTS_REPLY
from voyant.graph.nodes.route import FLIGHT_SEARCH_PROMPT, filter_slots
from voyant.graph.nodes.search import SEARCH_UNAVAILABLE_REPLY
from voyant.graph.router import route_next_node
from voyant.graph.turn import handle_chat
from voyant.memory import get_last_receipts, get_thread_slots
from voyant.shared.config import DEFAULT_CONFIG, get_config
from voyant.tools import countries, deep_research, tavily_search
from voyant.tools import weather as weather_tool


# ============================================================================
# Test Fixtures
# ============================================================================


COMPLEX_QUERY = (
    "Plan a 5 day trip from Boston for a family with two kids, budget under $3000, "
    "we don't like crowds"
)


@pytest.fixture
def weather_calls(monkeypatch):
    """Replace the weather lookup with a fixed mild forecast; records each call."""
    calls = []

    def _get_weather(city, month=None, dates=None):
        calls.append({"city": city, "month": month, "dates": dates})
        return weather_tool.WeatherResult(
            ok=True,
            summary="Average highs of 24°C and lows of 15°C, with rain on about 3 days.",
            source="archive-api.open-meteo.com",
            max_c=24.0,
            min_c=15.0,
            query_type="climate",
        )

    monkeypatch.setattr(weather_tool, "get_weather", _get_weather)
    return calls


@pytest.fixture
def search_queries(monkeypatch):
    """Replace Tavily with two canned results; records each query."""
    queries = []

    def _search(query, max_results=None):
        queries.append(query)
        return tavily_search.SearchOutcome(
            ok=True,
            results=[
                tavily_search.SearchResult(
                    title="Lisbon festivals", url="https://a.example/festivals", description="Santo Antonio in June."
                ),
                tavily_search.SearchResult(
                    title="Flights to Lisbon", url="https://b.example/flights", description="Direct routes from Boston."
                ),
            ],
        )

    monkeypatch.setattr(tavily_search, "search_travel_info", _search)
    return queries


@pytest.fixture
def no_country_facts(monkeypatch):
    monkeypatch.setattr(
        countries, "get_country_facts", lambda country: countries.CountryFacts(ok=False, reason="unavailable")
    )


def _make_research_result(query):
    return deep_research.DeepResearchResult(
        query=query,
        summary="Consider Lisbon: short flights, beaches and quiet neighborhoods.",
        pages=[deep_research.ResearchPage(url="https://a.example", title="Lisbon", content="...", summary="...")],
        citations=[deep_research.ResearchCitation(source="Tavily", url="https://a.example", title="Lisbon")],
    )


# ============================================================================
# TestPreflight
# ============================================================================


class TestPreflight:
    """Tests for messages answered before routing."""

    def test_off_topic_is_steered_back(self):
        result = handle_chat("Write me a python script", "t1")
        assert result.reply == TRAVEL_FOCUS_REPLY

    def test_emoji_only(self):
        assert handle_chat("🌴🌞", "t1").reply == TRAVEL_FOCUS_REPLY

    def test_identity_question(self):
        assert handle_chat("Who are you?", "t1").reply == IDENTITY_REPLY

    def test_new_thread_id_when_missing(self):
        result = handle_chat("Who are you?")
        assert result.thread_id


# ============================================================================
# TestWeatherAndPacking
# ============================================================================


class TestWeatherAndPacking:
    """Tests for the weather and packing flows."""

    def test_weather_with_city_and_month(self, weather_calls):
        result = handle_chat("What's the weather in Paris in June?", "t1")

        assert result.reply.startswith("Weather in Paris: Average highs of 24°C")
        assert result.citations == ["archive-api.open-meteo.com"]
        assert weather_calls == [{"city": "Paris", "month": "June", "dates": "June"}]
        assert get_thread_slots("t1")["city"] == "Paris"

    def test_llm_blend_used_when_available(self, fake_llm, weather_calls):
        fake_llm.add("Traveler asked", "Expect warm days around 24°C in Paris this June.")
        result = handle_chat("What's the weather in Paris in June?", "t1")
        assert result.reply == "Expect warm days around 24°C in Paris this June."

    def test_weather_failure_reply(self, monkeypatch):
        monkeypatch.setattr(
            weather_tool,
            "get_weather",
            lambda city, month=None, dates=None: weather_tool.WeatherResult(ok=False, reason="unknown_city"),
        )
        result = handle_chat("What's the weather in Atlantis?", "t1")
        assert result.reply == "I couldn't find weather data for Atlantis. Could you check the city name?"

    def test_packing_asks_for_city_then_uses_answer(self, weather_calls):
        first = handle_chat("What should I pack?", "t1")
        assert first.reply == "Could you share the city and month/dates?"

        second = handle_chat("Paris in July", "t1")
        assert "Packing suggestions for Paris:" in second.reply
        assert "- Umbrella or rain jacket" in second.reply
        assert weather_calls[-1] == {"city": "Paris", "month": "July", "dates": "July"}

    def test_follow_up_reuses_thread_slots(self, weather_calls):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("What should I pack?", "t1")

        assert "Packing suggestions for Paris:" in result.reply
        assert weather_calls[-1]["city"] == "Paris"

    def test_switching_city_keeps_intent_and_month(self, weather_calls):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("What about Rome?", "t1")

        assert result.reply.startswith("Weather in Rome:")
        assert weather_calls[-1] == {"city": "Rome", "month": "June", "dates": "June"}

    def test_day_trip_skips_dates(self, weather_calls):
        result = handle_chat("I have 5 hours in Singapore, what should I pack?", "t1")

        assert result.reply.startswith(DAY_TRIP_NOTE)
        assert "Packing suggestions for Singapore:" in result.reply

    def test_what_to_wear_needs_no_dates(self, weather_calls):
        result = handle_chat("What to wear in Paris?", "t1")

        assert "Packing suggestions for Paris:" in result.reply
        assert weather_calls == [{"city": "Paris", "month": None, "dates": None}]

    def test_kids_need_no_dates(self, weather_calls):
        result = handle_chat("What should I pack for the kids in Rome?", "t1")

        assert "- Spare clothes for the kids" in result.reply
        assert weather_calls == [{"city": "Rome", "month": None, "dates": None}]

    def test_season_needs_no_dates(self, weather_calls):
        result = handle_chat("Going to Oslo in winter, what should I pack?", "t1")

        assert "Packing suggestions for Oslo:" in result.reply
        assert weather_calls[-1]["city"] == "Oslo"


# ============================================================================
# TestConflicts
# ============================================================================


class TestConflicts:
    """Tests for destination and season conflicts."""

    def test_two_cities_in_one_message(self):
        result = handle_chat("Is Paris or Rome better in June?", "t1")
        assert result.reply.startswith("I see multiple destinations mentioned: Paris, Rome.")

    def test_new_city_against_thread_city(self, weather_calls):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("Weather in Rome", "t1")
        assert result.reply.startswith("I see you've mentioned multiple cities: Rome, Paris.")

    def test_multiple_seasons(self):
        result = handle_chat("Should I go to Oslo in winter or summer?", "t1")
        assert result.reply.startswith("I notice you mentioned multiple seasons (winter, summer).")

    def test_leading_verb_is_not_a_city(self, weather_calls):
        result = handle_chat("Heading to Rome in June, what's the weather like?", "t1")

        assert result.reply.startswith("Weather in Rome:")
        assert weather_calls == [{"city": "Rome", "month": "June", "dates": "June"}]

    def test_llm_city_list_used(self, fake_llm):
        fake_llm.add("List every city", json.dumps({"cities": ["Paris", "Rome"]}))
        result = handle_chat("is paris or rome nicer in june?", "t1")
        assert result.reply.startswith("I see multiple destinations mentioned: Paris, Rome.")


# ============================================================================
# TestDestinationsAndAttractions
# ============================================================================


class TestDestinationsAndAttractions:
    """Tests for catalog recommendations and the attractions fallback."""

    def test_destinations_from_catalog(self, monkeypatch):
        monkeypatch.setattr(
            countries, "get_country_facts", lambda country: countries.CountryFacts(ok=False, reason="unavailable")
        )
        result = handle_chat("Recommend destinations for June leaving from Chicago", "t1")

        assert result.reply.startswith("Based on your preferences, here are some recommended destinations:")
        assert result.citations == ["Destination Catalog"]
        assert get_thread_slots("t1")["originCity"] == "Chicago"

    def test_attractions_fall_back_to_search(self, search_queries):
        result = handle_chat("What attractions are in Paris?", "t1")

        assert search_queries == ["Paris attractions things to do"]
        assert result.reply.startswith("Based on web search results:")
        assert result.citations == ["https://a.example/festivals", "https://b.example/flights"]


# ============================================================================
# TestPolicy
# ============================================================================


class TestPolicy:
    """Tests for knowledge-base answers and the web search handshake."""

    def test_answer_from_knowledge_base(self, fake_llm):
        fake_llm.add("Answer the traveler's policy question", "One carry-on up to 8 kg [1].")
        result = handle_chat("What is the carry-on baggage allowance?", "t1")

        assert result.reply.startswith("One carry-on up to 8 kg [1].\n\nSources:\n1. Baggage Policy: Carry-on allowance")
        assert "https://voyant.travel/policies/baggage" in result.citations

    def test_no_results_then_consent(self, search_queries):
        first = handle_chat("Do I need a visa for Antarctica?", "t1")
        assert first.reply == POLICY_NO_RESULTS_REPLY
        assert get_thread_slots("t1")["awaiting_web_search_consent"] == "true"

        second = handle_chat("yes", "t1")
        assert second.reply.startswith("Based on web search results:")
        assert search_queries == ["Do I need a visa for Antarctica"]
        assert "awaiting_web_search_consent" not in get_thread_slots("t1")

    def test_no_results_then_decline(self):
        handle_chat("Do I need a visa for Antarctica?", "t1")
        result = handle_chat("no thanks", "t1")

        assert result.reply == "Understood. Feel free to ask me anything else!"
        assert "pending_web_search_query" not in get_thread_slots("t1")


# ============================================================================
# TestWebSearch
# ============================================================================


class TestWebSearch:
    """Tests for explicit searches and the flight consent handshake."""

    def test_explicit_search_summarized(self, fake_llm, search_queries):
        fake_llm.add("Summarize these web search results", "Lisbon celebrates Santo Antonio in June.")
        result = handle_chat("Search the web for Lisbon festivals", "t1")

        assert result.reply.startswith("Lisbon celebrates Santo Antonio in June.\n\nSources:\n1. Lisbon festivals")
        assert search_queries == ["Lisbon festivals"]

    def test_summary_disabled_lists_results(self, monkeypatch, fake_llm, search_queries):
        monkeypatch.setattr(DEFAULT_CONFIG, "search_summary", False)
        fake_llm.add("Summarize these web search results", "unused")
        result = handle_chat("Search the web for Lisbon festivals", "t1")

        assert result.reply.startswith("Based on web search results:\n\n• Lisbon festivals - Santo Antonio in June.")
        assert result.reply.endswith("Sources: Tavily")

    def test_search_unavailable(self):
        result = handle_chat("Search the web for Lisbon festivals", "t1")
        assert result.reply == SEARCH_UNAVAILABLE_REPLY

    def test_flight_question_asks_before_searching(self, fake_llm, search_queries):
        fake_llm.add(
            "You route messages",
            json.dumps({"intent": "destinations", "confidence": 0.9, "slots": {"city": "Lisbon"}}),
        )
        first = handle_chat("Which airlines fly to Lisbon?", "t1")
        assert first.reply == FLIGHT_SEARCH_PROMPT
        assert search_queries == []

        second = handle_chat("yes", "t1")
        assert second.reply.startswith("Based on web search results:")
        assert search_queries == ["Which airlines fly to Lisbon"]
        assert "awaiting_search_consent" not in get_thread_slots("t1")

    def test_flight_search_declined(self, fake_llm):
        fake_llm.add(
            "You route messages",
            json.dumps({"intent": "destinations", "confidence": 0.9, "slots": {"city": "Lisbon"}}),
        )
        handle_chat("Which airlines fly to Lisbon?", "t1")
        result = handle_chat("no", "t1")
        assert result.reply == "No problem! Is there something else about travel planning I can help with?"


# ============================================================================
# TestDeepResearch
# ============================================================================


class TestDeepResearch:
    """Tests for the deep research consent handshake."""

    def test_complex_query_asks_for_consent(self):
        result = handle_chat(COMPLEX_QUERY, "t1")

        assert result.reply.startswith("This looks like a complex travel planning query")
        assert "Reason: Detected 5 planning constraints" in result.reply
        slots = get_thread_slots("t1")
        assert slots["awaiting_deep_research_consent"] == "true"
        assert slots["pending_deep_research_query"] == COMPLEX_QUERY

    def test_turn_config_disables_deep_research(self):
        result = handle_chat(COMPLEX_QUERY, "t1", config=get_config(deep_research=False))

        assert not result.reply.startswith("This looks like a complex travel planning query")
        assert "awaiting_deep_research_consent" not in get_thread_slots("t1")
        assert get_thread_slots("t1")["originCity"] == "Boston"

    def test_consent_runs_research(self, monkeypatch):
        researched = []

        def _research(query):
            researched.append(query)
            return _make_research_result(query)

        monkeypatch.setattr(deep_research, "perform_deep_research", _research)
        handle_chat(COMPLEX_QUERY, "t1")
        result = handle_chat("yes", "t1")

        assert researched == [COMPLEX_QUERY]
        assert result.reply.startswith("Consider Lisbon")
        assert result.reply.endswith("Sources:\n1. Lisbon - https://a.example")
        assert result.citations == ["https://a.example"]
        assert "awaiting_deep_research_consent" not in get_thread_slots("t1")

    def test_research_failure(self, monkeypatch):
        def _fail(query):
            raise deep_research.DeepResearchError("No search results")

        monkeypatch.setattr(deep_research, "perform_deep_research", _fail)
        handle_chat(COMPLEX_QUERY, "t1")
        result = handle_chat("yes", "t1")
        assert result.reply.startswith("I ran into an issue while doing deep research.")

    def test_decline_routes_original_query(self):
        handle_chat(COMPLEX_QUERY, "t1")
        handle_chat("no", "t1")

        receipts = get_last_receipts("t1")
        assert "User declined deep research; routing the original query" in receipts.decisions
        slots = get_thread_slots("t1")
        assert "awaiting_deep_research_consent" not in slots
        assert slots["originCity"] == "Boston"

    def test_new_question_drops_pending_consent(self, weather_calls):
        handle_chat(COMPLEX_QUERY, "t1")
        result = handle_chat("What is the weather in Tokyo?", "t1")

        assert result.reply.startswith("Weather in Tokyo:")
        assert "pending_deep_research_query" not in get_thread_slots("t1")


# ============================================================================
# TestRefinements
# ============================================================================


class TestRefinements:
    """Tests for follow-ups that continue the previous intent."""

    def test_kid_refinement_keeps_last_intent(self, weather_calls):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("Any suggestions for the kids?", "t1")

        assert result.reply.startswith("Weather in Paris:")
        assert len(weather_calls) == 2
        assert "Routed to weather (confidence 0.80)" in get_last_receipts("t1").decisions

    def test_kid_refinement_asking_for_attractions(self, weather_calls, search_queries):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("Any activities for the kids?", "t1")

        assert result.reply.startswith("Based on web search results:")
        assert search_queries == ["Paris attractions things to do"]
        assert len(weather_calls) == 1

    def test_kid_refinement_with_new_city(self, weather_calls, no_country_facts):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("Can you recommend family stays in Rome for June?", "t1")

        assert result.reply.startswith("Based on your preferences")
        assert "Routed to destinations (confidence 0.80)" in get_last_receipts("t1").decisions
        assert get_thread_slots("t1")["city"] == "Rome"

    def test_flight_time_refinement_keeps_last_intent(self, weather_calls, no_country_facts):
        handle_chat("Recommend destinations for June leaving from Chicago", "t1")
        result = handle_chat("Any quicker flight options? And what's the weather?", "t1")

        assert result.reply.startswith("Based on your preferences")
        assert weather_calls == []
        assert "Routed to destinations (confidence 0.80)" in get_last_receipts("t1").decisions


# ============================================================================
# TestSlotFiltering
# ============================================================================


class TestSlotFiltering:
    """Tests for filter_slots and placeholder values from the router."""

    @pytest.mark.parametrize(
        "city",
        ["unknown", "there", "paris", "Beach City", "Next Week", "June", "   "],
    )
    def test_rejected_city_values(self, city):
        assert filter_slots({"city": city}) == {}

    def test_date_placeholder_rejected(self):
        assert filter_slots({"dates": "month_name", "month": "June"}) == {"month": "June"}

    def test_real_values_kept(self):
        slots = {"city": "New York", "dates": "June 10-15", "originCity": "Boston"}
        assert filter_slots(slots) == slots

    def test_placeholder_city_from_router_asks_for_city(self, fake_llm):
        fake_llm.add(
            "You route messages",
            json.dumps({"intent": "weather", "confidence": 0.9, "slots": {"city": "unknown"}}),
        )
        result = handle_chat("What's the weather like?", "t1")

        assert result.reply == "Which city are you asking about?"
        assert "city" not in get_thread_slots("t1")


# ============================================================================
# TestDisclaimers
# ============================================================================


class TestDisclaimers:
    """Tests for disclaimers prefixed to handler replies."""

    def test_budget_disclaimer(self, weather_calls):
        result = handle_chat("What's the weather in Paris in June? Is it cheap?", "t1")
        assert result.reply.startswith(BUDGET_DISCLAIMER + "Weather in Paris:")

    def test_language_warning(self, weather_calls):
        result = handle_chat("What's the weather in Paris in June? 天気", "t1")
        assert result.reply.startswith(LANGUAGE_WARNING + "Weather in Paris:")

    def test_plain_english_has_no_disclaimer(self, weather_calls):
        result = handle_chat("What's the weather in Paris in June?", "t1")
        assert result.reply.startswith("Weather in Paris:")


# ============================================================================
# TestReceipts
# ============================================================================


class TestReceipts:
    """Tests for /why and attached receipts."""

    def test_why_explains_last_answer(self, weather_calls):
        handle_chat("What's the weather in Paris in June?", "t1")
        result = handle_chat("/why", "t1")

        assert result.reply.startswith("Here's how I got my last answer:")
        assert "Sources: archive-api.open-meteo.com" in result.reply
        assert "- Routed to weather (confidence 0.80)" in result.reply
        assert result.citations == ["archive-api.open-meteo.com"]

    def test_why_without_history(self):
        result = handle_chat("/why", "fresh")
        assert result.reply == "I don't have any details about a previous answer in this conversation yet."

    def test_why_does_not_replace_receipts(self, weather_calls):
        handle_chat("What's the weather in Paris in June?", "t1")
        handle_chat("/why", "t1")
        assert get_last_receipts("t1").reply.startswith("Weather in Paris:")

    def test_receipts_attached_on_request(self, weather_calls):
        result = handle_chat("What's the weather in Paris in June?", "t1", receipts=True)

        assert result.receipts is not None
        assert {f.key for f in result.receipts.facts} >= {"weather_summary", "max_temp_c", "city"}


# ============================================================================
# TestRouteNextNode
# ============================================================================


class TestRouteNextNode:
    """Tests for the conditional edge function."""

    def test_reply_ends_turn(self):
        assert route_next_node({"reply": "Hi", "next_node": "weather"}) == "done"

    def test_named_node(self):
        assert route_next_node({"next_node": "policy"}) == "policy"

    def test_unexpected_node_goes_to_unknown(self):
        assert route_next_node({"next_node": "flights"}) == "unknown"
        assert route_next_node({}) == "unknown"
