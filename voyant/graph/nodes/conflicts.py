"""
Conflicts node.

Asks the user to pick one destination when a message names several
cities (or a new city next to the one already in the thread), and one
season when several are mentioned.
"""

import logging
import re
from typing import Any, Dict, List

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import finish, handoff, log_prefix
from voyant.nlp.parsers import extract_cities


logger = logging.getLogger(__name__)

NON_CITY_WORDS = [
    "the", "and", "but", "for", "can", "will", "what", "how", "to", "in", "about",
    "weather", "weaher", "pack", "packing", "trip", "travel", "visit", "go", "going",
    "attractions", "things", "places", "where", "when", "which", "should", "would",
    "is", "are", "do", "does", "could", "please", "hi", "hello", "hey", "thanks",
    "thank", "yes", "no", "my", "we", "our", "any", "also", "make", "let", "lets",
    "tell", "give", "show", "find", "search", "who", "why", "with", "from",
    "winter", "summer", "spring", "fall", "autumn", "ok", "okay", "sure", "plan",
    "planning", "help", "suggest", "recommend", "best", "good", "great", "nice",
]

COMPLEX_QUERY_RE = re.compile(
    r"\b(budget|cost|price|adults?|kids?|children|toddler|family|days?|weeks?"
    r"|flights?|dislikes?|ideas?)\b|\$\d+",
    re.IGNORECASE,
)

# Phrases that pick a city rather than add one ("how about Boston")
SWITCH_RE = re.compile(
    r"\b(let'?s\s+say|lets\s+say|how\s+about|what\s+about|instead|switch\s+to|rather)\b",
    re.IGNORECASE,
)

SEASON_RE = re.compile(r"\b(winter|summer|spring|fall|autumn)\b", re.IGNORECASE)

_SELECTION_FILLER = {"please", "i", "mean", "the", "city", "of", "in", "to", "for", "go", "with", "one"}


def _is_selection(message: str, candidates: List[str]) -> bool:
    """True when the message is just a city choice, e.g. "Paris" or "Paris please"."""
    remainder = message
    for city in candidates:
        remainder = remainder.replace(city, " ")
    words = re.findall(r"[a-z']+", remainder.lower())
    return all(w in _SELECTION_FILLER for w in words)


def conflicts_node(state: TurnState) -> Dict[str, Any]:
    """Detect destination and season conflicts before routing."""
    _log = log_prefix(state, "conflicts")
    message = state["message"]
    slots = state.get("slots") or {}

    in_message = extract_cities(message, NON_CITY_WORDS)
    previous = [c for c in (slots.get("city"), slots.get("originCity")) if c]
    all_cities = list(dict.fromkeys(in_message + previous))
    is_complex = bool(COMPLEX_QUERY_RE.search(message))

    logger.info(
        f"{_log}Entering node | message_cities={in_message}, previous={previous}, "
        f"complex={is_complex}"
    )

    if not is_complex and len(in_message) > 1:
        return finish(
            "conflicts",
            f"I see multiple destinations mentioned: {', '.join(in_message)}. "
            "Which specific destination would you like information about?",
            decisions=[f"Multiple destinations in one message: {in_message}"],
        )

    if (
        not is_complex
        and in_message
        and previous
        and len(all_cities) > 1
        and not SWITCH_RE.search(message)
        and not _is_selection(message, in_message)
    ):
        return finish(
            "conflicts",
            f"I see you've mentioned multiple cities: {', '.join(all_cities)}. "
            "Which specific destination would you like information about?",
            decisions=[f"New city {in_message} conflicts with thread cities {previous}"],
        )

    seasons = list(dict.fromkeys(s.lower() for s in SEASON_RE.findall(message)))
    if len(seasons) > 1:
        return finish(
            "conflicts",
            f"I notice you mentioned multiple seasons ({', '.join(seasons)}). "
            "Which season are you planning to travel in?",
            decisions=[f"Multiple seasons mentioned: {seasons}"],
        )

    return handoff("conflicts", "route")
