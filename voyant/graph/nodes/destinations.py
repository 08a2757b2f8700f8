"""Destinations and attractions nodes."""

import logging
import re
from typing import Any, Dict

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import fact, finish, handoff, log_prefix
from voyant.tools import attractions as attractions_tool
from voyant.tools import destinations as destinations_tool


logger = logging.getLogger(__name__)

KID_FRIENDLY_RE = re.compile(
    r"\b(kids?|children|family|toddler|stroller|kid-friendly|kid friendly)\b", re.IGNORECASE
)
ATTRACTIONS_LIMIT = 7


def destinations_node(state: TurnState) -> Dict[str, Any]:
    """
    Recommend destinations from the catalog.

    Falls back to a web search when the catalog has nothing for the
    thread's month and profile or the recommender fails.
    """
    _log = log_prefix(state, "destinations")
    slots = state.get("slots") or {}
    month = slots.get("month") or slots.get("dates") or ""
    profile = slots.get("travelerProfile") or ""
    logger.info(f"{_log}Entering node | month={month}, profile={profile}")

    try:
        recommendations = destinations_tool.recommend_destinations(slots)
    except Exception as e:
        logger.warning(f"{_log}Destination recommender failed: {e}")
        recommendations = []

    if not recommendations:
        query = " ".join(p for p in ("travel destinations", month, profile) if p)
        return handoff(
            "destinations",
            "web_search",
            search_query=query,
            decisions=["No catalog destinations matched; falling back to web search"],
        )

    reply = "Based on your preferences, here are some recommended destinations:\n\n" + "; ".join(
        d.describe() for d in recommendations
    )
    facts = []
    for d in recommendations:
        facts.append(fact("Destination Catalog", "destination", d.describe()))
        if d.country_summary:
            facts.append(fact("REST Countries", "country", d.country_summary, d.url))

    citations = ["Destination Catalog"]
    if any(d.source == "Catalog+REST Countries" for d in recommendations):
        citations.append("REST Countries")

    return finish(
        "destinations",
        reply,
        citations=citations,
        facts=facts,
        decisions=[f"Recommended {[d.city for d in recommendations]} from the catalog"],
        disclaimers=state.get("disclaimers", ""),
    )


def attractions_node(state: TurnState) -> Dict[str, Any]:
    """List attractions for the thread's city, kid-friendly when the context asks for it."""
    _log = log_prefix(state, "attractions")
    slots = state.get("slots") or {}
    city = slots.get("city", "")
    kid_context = " ".join([state["message"], slots.get("travelerProfile", "")])
    profile = "kid_friendly" if KID_FRIENDLY_RE.search(kid_context) else "default"
    logger.info(f"{_log}Entering node | city={city}, profile={profile}")

    result = attractions_tool.get_attractions(city, limit=ATTRACTIONS_LIMIT, profile=profile)
    if not result.ok or not result.attractions:
        logger.info(f"{_log}Attractions lookup failed ({result.reason}), falling back to web search")
        return handoff(
            "attractions",
            "web_search",
            search_query=f"{city} attractions things to do",
            decisions=[f"OpenTripMap lookup failed ({result.reason}); falling back to web search"],
        )

    source = result.source or attractions_tool.SOURCE_NAME
    reply = f"Here are some attractions in {city}:\n\n{result.summary}\n\nSource: {source}"
    return finish(
        "attractions",
        reply,
        citations=[source],
        facts=[fact(source, "attraction", a.name) for a in result.attractions],
        decisions=[f"Listed {len(result.attractions)} {profile} attractions"],
        disclaimers=state.get("disclaimers", ""),
    )
