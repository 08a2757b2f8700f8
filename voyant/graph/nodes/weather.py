"""
Weather and packing nodes.

Both look up weather for the thread's city and blend the facts into a
short LLM answer, falling back to a templated reply when the LLM is
unavailable.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import fact, finish, log_prefix
from voyant.prompts.templates import BLEND_SYSTEM_PROMPT, PACKING_BLEND_PROMPT, WEATHER_BLEND_PROMPT
from voyant.shared.llm.client import get_llm_response
from voyant.tools import weather as weather_tool


logger = logging.getLogger(__name__)

KID_RE = re.compile(r"\b(kids?|children|toddler|family|stroller)\b", re.IGNORECASE)

_REASON_REPLIES = {
    "unknown_city": "I couldn't find weather data for {city}. Could you check the city name?",
    "weather_unavailable": "I couldn't reach the weather service for {city} right now. Please try again shortly.",
}


def _when(slots: Dict[str, str]) -> str:
    return slots.get("dates") or slots.get("month") or "now"


def _weather_facts(result: weather_tool.WeatherResult, city: str) -> List[Dict[str, Any]]:
    url = f"https://{result.source}" if result.source and "open-meteo" in result.source else None
    facts = [fact(result.source or "weather", "weather_summary", result.summary, url)]
    if result.max_c is not None:
        facts.append(fact(result.source, "max_temp_c", result.max_c, url))
    if result.min_c is not None:
        facts.append(fact(result.source, "min_temp_c", result.min_c, url))
    facts.append(fact(result.source, "city", city, url))
    return facts


def _lookup(state: TurnState, node: str) -> weather_tool.WeatherResult:
    slots = state.get("slots") or {}
    city = slots.get("city", "")
    _log = log_prefix(state, node)
    result = weather_tool.get_weather(city, month=slots.get("month"), dates=slots.get("dates"))
    logger.info(
        f"{_log}Weather lookup | city={city}, ok={result.ok}, type={result.query_type}, "
        f"reason={result.reason}"
    )
    return result


def weather_node(state: TurnState) -> Dict[str, Any]:
    """Answer a weather question for the thread's city."""
    _log = log_prefix(state, "weather")
    slots = state.get("slots") or {}
    city = slots.get("city", "")
    logger.info(f"{_log}Entering node | city={city}, when={_when(slots)}")

    result = _lookup(state, "weather")
    disclaimers = state.get("disclaimers", "")

    if not result.ok:
        template = _REASON_REPLIES.get(result.reason or "", _REASON_REPLIES["weather_unavailable"])
        return finish(
            "weather",
            template.format(city=city),
            decisions=[f"Weather lookup failed ({result.reason})"],
            disclaimers=disclaimers,
        )

    try:
        reply = get_llm_response(
            WEATHER_BLEND_PROMPT.format(
                message=state["message"],
                city=city,
                when=_when(slots),
                weather=result.summary,
            ),
            system_prompt=BLEND_SYSTEM_PROMPT,
        ).strip()
    except Exception as e:
        logger.debug(f"{_log}Weather blend failed, using template: {e}")
        reply = ""
    if not reply:
        reply = f"Weather in {city}: {result.summary}"

    return finish(
        "weather",
        reply,
        citations=[result.source] if result.source else [],
        facts=_weather_facts(result, city),
        decisions=[f"Weather answered from {result.query_type} data"],
        disclaimers=disclaimers,
    )


def fallback_packing_list(
    summary: str, max_c: Optional[float], kids: bool, short_trip: bool
) -> List[str]:
    """Packing items derived from the weather facts."""
    text = summary.lower()
    items = ["Comfortable walking shoes", "Phone charger and travel adapter"]

    if (max_c is not None and max_c < 10) or "snow" in text:
        items += ["Warm coat", "Hat, scarf and gloves", "Thermal layers"]
    elif max_c is not None and max_c > 24:
        items += ["Light breathable clothing", "Sunscreen", "Sunglasses and a hat"]
    else:
        items += ["Layers (t-shirts and a light sweater)", "Light jacket"]

    if "rain" in text or "shower" in text or "drizzle" in text:
        items.append("Umbrella or rain jacket")
    if kids:
        items += ["Snacks and a refillable water bottle", "Spare clothes for the kids"]
    if short_trip:
        items = items[:4]
    return items


def packing_node(state: TurnState) -> Dict[str, Any]:
    """
    Suggest what to pack for the thread's city.

    Weather facts drive the advice. Kid/family context and day trips are
    passed to the LLM and shape the fallback list.
    """
    _log = log_prefix(state, "packing")
    slots = state.get("slots") or {}
    city = slots.get("city", "")
    message = state["message"]
    kids = bool(KID_RE.search(message) or KID_RE.search(slots.get("travelerProfile", "")))
    short_trip = bool(state.get("short_timeframe"))
    logger.info(f"{_log}Entering node | city={city}, kids={kids}, short_trip={short_trip}")

    result = _lookup(state, "packing")
    disclaimers = state.get("disclaimers", "")
    weather_text = result.summary if result.ok else "Weather data unavailable."

    notes = []
    if kids:
        notes.append("Traveling with kids.")
    if short_trip:
        notes.append("Short trip of a few hours; keep it minimal.")

    try:
        reply = get_llm_response(
            PACKING_BLEND_PROMPT.format(
                message=message,
                city=city,
                when=_when(slots),
                profile=slots.get("travelerProfile") or ("family with kids" if kids else "not specified"),
                weather=weather_text,
                notes=" ".join(notes) or "None",
            ),
            system_prompt=BLEND_SYSTEM_PROMPT,
        ).strip()
    except Exception as e:
        logger.debug(f"{_log}Packing blend failed, using template: {e}")
        reply = ""
    if not reply:
        items = fallback_packing_list(
            result.summary if result.ok else "", result.max_c, kids, short_trip
        )
        lines = "\n".join(f"- {item}" for item in items)
        lead = f"Weather in {city}: {result.summary}\n\n" if result.ok else ""
        reply = f"{lead}Packing suggestions for {city}:\n{lines}"

    decisions = ["Packing list built from weather facts" if result.ok else "Packing list without weather data"]
    if kids:
        decisions.append("Kid-friendly packing items included")

    return finish(
        "packing",
        reply,
        citations=[result.source] if result.ok and result.source else [],
        facts=_weather_facts(result, city) if result.ok else [],
        decisions=decisions,
        disclaimers=disclaimers,
    )
