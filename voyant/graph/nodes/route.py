"""
Route node.

Routes the message, filters and merges slots with the thread's memory,
carries refinements over from the previous intent, and either asks for
what is missing or hands off to the intent's handler node.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from voyant.graph.state import TurnState
from voyant.graph.nodes.conflicts import NON_CITY_WORDS, SWITCH_RE
from voyant.graph.nodes.common import (
    DAY_TRIP_NOTE,
    finish,
    handoff,
    log_prefix,
    profile_slots,
)
from voyant.memory import (
    get_expected_missing,
    get_last_intent,
    get_thread_slots,
    set_last_intent,
    update_thread_slots,
)
from voyant.nlp.classifier import classify_content
from voyant.nlp.clarifier import build_clarifying_question
from voyant.nlp.parsers import CITY_PLACEHOLDERS, DATE_PLACEHOLDERS, MONTH_WORDS, city_candidates
from voyant.nlp.router import route_intent
from voyant.shared.logging import log_state_transition


logger = logging.getLogger(__name__)

CITY_INTENTS = ("weather", "packing", "attractions", "destinations")

DEEP_RESEARCH_PROMPT = (
    "This looks like a complex travel planning query that could benefit from deep "
    "research across multiple sources. This may take a bit longer. Proceed with deep "
    "research?\n\nReason: {reasoning}"
)
FLIGHT_SEARCH_PROMPT = (
    "I can search the web to find current flight and airline information. "
    "Would you like me to do that?"
)

_PROPER_RE = re.compile(r"^[A-Z][A-Za-z\- ]+$")
_GENERIC_CITY_WORDS = ("city", "destination", "place")
_TEMPORAL_CITY_RE = re.compile(r"\b(today|now|tomorrow|next|last|week|month|year)\b")

KID_CONTEXT_RE = re.compile(
    r"\b(kids?|children|family|make it kid|kid-friendly|kid friendly|toddler"
    r"|3\s*-?\s*year|stroller)\b",
    re.IGNORECASE,
)
ASKS_ATTRACTIONS_RE = re.compile(
    r"\b(attractions?|what to do|what should we do|do in|museums?|activities)\b",
    re.IGNORECASE,
)
NEW_CITY_RE = re.compile(r"\b(?:(?i:let'?s\s+say)|in|to)\s+[A-Z][A-Za-z\- ]+")
FLIGHT_REFINEMENT_RE = re.compile(
    r"\b(flight time|shorten flight|shorter flight|reduce travel time|quicker flight"
    r"|shorten travel time|less layover|fewer stops)\b",
    re.IGNORECASE,
)
IMMEDIATE_CONTEXT_RE = re.compile(r"\b(today|now|currently|right now|what to wear)\b", re.IGNORECASE)
SPECIAL_CONTEXT_RE = re.compile(
    r"\b(kids?|children|family|business|work|summer|winter|spring|fall)\b", re.IGNORECASE
)
FLIGHT_QUERY_RE = re.compile(
    r"airline|flight|fly|plane|ticket|booking|what\s+airlines|which\s+airlines", re.IGNORECASE
)


def filter_slots(extracted: Dict[str, str]) -> Dict[str, str]:
    """
    Drop placeholder and non-city values from freshly extracted slots.

    City values must look like a proper name and must not be generic
    ("city", "destination") or temporal. Other slots only lose known
    placeholders.
    """
    filtered = {}
    for key, value in extracted.items():
        if not isinstance(value, str) or not value.strip():
            continue
        lowered = value.lower()
        if key == "city":
            if lowered in CITY_PLACEHOLDERS:
                continue
            if not _PROPER_RE.match(value):
                continue
            if any(word in lowered for word in _GENERIC_CITY_WORDS):
                continue
            if lowered in MONTH_WORDS or _TEMPORAL_CITY_RE.search(lowered):
                continue
            filtered[key] = value
            continue
        if lowered not in DATE_PLACEHOLDERS:
            filtered[key] = value
    return filtered


def resolve_intent(
    intent: str,
    message: str,
    prior: Dict[str, str],
    last_intent: str,
    expected_missing: Optional[List[str]] = None,
) -> str:
    """
    Carry the previous intent over for follow-ups.

    Unknown intents inherit the last intent when the thread has slots or
    is waiting for an answer to a clarifying question.
    Kid/family refinements continue the last intent unless the message asks
    for attractions or names a new city; flight-time refinements always do.
    """
    has_last = bool(last_intent) and last_intent != "unknown"
    if intent in ("policy", "web_search"):
        return intent

    if intent == "unknown" and has_last and (prior or expected_missing):
        intent = last_intent

    if (
        has_last
        and KID_CONTEXT_RE.search(message)
        and not ASKS_ATTRACTIONS_RE.search(message)
        and not NEW_CITY_RE.search(message)
    ):
        intent = last_intent

    if has_last and FLIGHT_REFINEMENT_RE.search(message):
        intent = last_intent

    return intent


def missing_slots(intent: str, slots: Dict[str, str], message: str) -> List[str]:
    """Slots the handler for ``intent`` still needs."""
    has_city = bool((slots.get("city") or "").strip())
    if intent == "destinations":
        has_city = has_city or bool((slots.get("originCity") or "").strip())
    has_when = bool((slots.get("dates") or "").strip() or (slots.get("month") or "").strip())

    missing = []
    if intent in CITY_INTENTS and not has_city:
        missing.append("city")
    if intent == "destinations" and not has_when:
        missing.append("dates")
    if (
        intent == "packing"
        and not has_when
        and not IMMEDIATE_CONTEXT_RE.search(message)
        and not SPECIAL_CONTEXT_RE.search(message)
    ):
        missing.append("dates")
    return missing


def _is_flight_query(message: str) -> bool:
    try:
        return classify_content(message).content_type == "flight"
    except Exception as e:
        logger.debug(f"Flight classification failed, using patterns: {e}")
        return bool(FLIGHT_QUERY_RE.search(message))


def route_node(state: TurnState) -> Dict[str, Any]:
    """
    Route the message and decide whether the turn can be answered.

    Args:
        state: Current turn state

    Returns:
        A finished reply (deep research consent, flight search consent,
        clarifying question) or a handoff to the handler node.
    """
    _log = log_prefix(state, "route")
    thread_id = state["thread_id"]
    message = state["message"]
    prior = profile_slots(get_thread_slots(thread_id))

    route = route_intent(
        message,
        prior,
        allow_deep_research=not state.get("skip_deep_research", False),
    )
    logger.info(f"{_log}Entering node | intent={route.intent}, extracted={route.slots}")

    if route.slots.get("deep_research_consent_needed") == "true":
        reasoning = route.slots.get("complexity_reasoning") or "Multiple constraints detected."
        update_thread_slots(
            thread_id,
            {
                "awaiting_deep_research_consent": "true",
                "pending_deep_research_query": message,
                "complexity_reasoning": reasoning,
            },
        )
        log_state_transition("deep_research_consent_requested", state, logger=logger)
        return finish(
            "route",
            DEEP_RESEARCH_PROMPT.format(reasoning=reasoning),
            decisions=[f"Complex query detected; asked for deep research consent ({reasoning})"],
        )

    filtered = filter_slots(route.slots)

    # A bare answer to "Which city?" or a switch ("what about Rome") names the city
    expected = get_expected_missing(thread_id)
    if not filtered.get("city") and ("city" in expected or SWITCH_RE.search(message)):
        candidates = city_candidates(message, NON_CITY_WORDS)
        if candidates:
            filtered.update(filter_slots({"city": candidates[0]}))

    slots = {**prior, **filtered}
    if prior.get("originCity") and not filtered.get("originCity"):
        slots["originCity"] = prior["originCity"]

    last_intent = get_last_intent(thread_id)
    intent = resolve_intent(route.intent, message, prior, last_intent, expected)
    if intent != route.intent:
        logger.info(f"{_log}Intent carried over | routed={route.intent}, using={intent}")
    set_last_intent(thread_id, intent)

    # Recomputed: the router's missing_slots ignores originCity, packing context and the carried intent
    missing = missing_slots(intent, slots, message)
    logger.info(
        f"{_log}Slot merge | prior={prior}, filtered={filtered}, intent={intent}, missing={missing}"
    )

    decisions = [f"Routed to {intent} (confidence {route.confidence:.2f})"]

    if intent == "destinations" and "dates" in missing and _is_flight_query(message):
        update_thread_slots(
            thread_id,
            {"awaiting_search_consent": "true", "pending_search_query": message},
        )
        return finish(
            "route",
            FLIGHT_SEARCH_PROMPT,
            decisions=decisions + ["Flight question without dates; asked for web search consent"],
        )

    if missing:
        prefix = ""
        if "dates" in missing and state.get("short_timeframe"):
            missing = [m for m in missing if m != "dates"]
            prefix = DAY_TRIP_NOTE
            decisions.append("Short trip; dates not required")

        if missing:
            update_thread_slots(thread_id, slots, missing)
            question = build_clarifying_question(missing, slots)
            log_state_transition(
                "clarification_requested",
                {**state, "slots": slots, "intent": intent, "missing": missing},
                logger=logger,
            )
            return finish(
                "route",
                prefix + question,
                decisions=decisions + [f"Missing slots {missing}; asked a clarifying question"],
            )

    update_thread_slots(thread_id, slots, [])
    log_state_transition(
        "route_complete",
        {**state, "slots": slots, "intent": intent, "missing": []},
        logger=logger,
    )
    return handoff(
        "route",
        intent,
        slots=slots,
        intent=intent,
        missing=[],
        decisions=decisions,
    )
