"""
Content classification and message-level signals.

Classifies a message before intent routing (travel, unrelated, budget,
gibberish...), detects non-English or mixed-script input, and spots
short timeframes such as day trips.
"""

import logging
import re
import unicodedata
from typing import Optional

from pydantic import BaseModel, ValidationError

from voyant.shared.contracts.route import ContentClassification
from voyant.shared.llm.client import get_llm_json
from voyant.shared.llm.response_parser import ParseError
from voyant.prompts.templates import CONTENT_CLASSIFICATION_PROMPT


logger = logging.getLogger(__name__)


EXPLICIT_SEARCH_RE = re.compile(
    r"\b(search (?:the )?(?:web|internet|online)|search for|web search|google"
    r"|look (?:it )?up online|look up|find online|browse the web)\b",
    re.IGNORECASE,
)

_SYSTEM_RE = re.compile(
    r"\b(who are you|what are you|what can you do|are you (?:a |an )?(?:bot|ai|human|robot)"
    r"|your name|who (?:made|built|created) you|what model)\b",
    re.IGNORECASE,
)

_REFINEMENT_RE = re.compile(
    r"^\s*(make it|what about|how about|and for|also|instead|actually|but)\b"
    r"|\b(kid[- ]friendly|for (?:the )?kids|with (?:a |the )?kids?|toddler|stroller)\b",
    re.IGNORECASE,
)

_BUDGET_RE = re.compile(
    r"\b(budget|cost|costs|price|prices|cheap|cheapest|expensive|afford|affordable|how much)\b|\$\d+",
    re.IGNORECASE,
)

_FLIGHT_RE = re.compile(
    r"\b(airlines?|flights?|fly|flying|plane|tickets?|booking)\b", re.IGNORECASE
)

_RESTAURANT_RE = re.compile(
    r"\b(restaurants?|where to eat|places to eat|dinner|lunch|brunch|cafes?|bars?)\b",
    re.IGNORECASE,
)

_TRAVEL_RE = re.compile(
    r"\b(travel|trip|weather|forecast|pack|packing|visit|destination|city|vacation"
    r"|holiday|flight|hotel|attractions?|museum|beach|visa|passport|tour)\b",
    re.IGNORECASE,
)

_UNRELATED_RE = re.compile(
    r"\b(recipe|cook|code|coding|python|javascript|program|stock|stocks|bitcoin|crypto"
    r"|homework|math|equation|football score|poem|joke|movie|song lyrics)\b",
    re.IGNORECASE,
)

_SHORT_TIMEFRAME_RE = re.compile(
    r"\b\d+\s*-?\s*(?:hours?|hrs?|minutes?|mins?)\b|\bday\s*trip\b", re.IGNORECASE
)

# Function words that strongly suggest a non-English Latin-script message
_FOREIGN_FUNCTION_WORDS = {
    "el", "los", "las", "que", "por", "para", "con", "una", "del",
    "le", "les", "des", "est", "une", "avec", "pour", "dans",
    "der", "die", "das", "und", "ist", "nicht", "mit", "ein",
    "il", "che", "per", "sono", "della",
}

_ENGLISH_FUNCTION_WORDS = {
    "the", "and", "is", "are", "what", "to", "in", "for", "of", "a", "i",
    "you", "it", "with", "on", "do", "how", "where", "when", "should",
}


class LanguageDetection(BaseModel):
    """Heuristic language signal for a message."""

    language: str
    has_mixed_languages: bool = False


def _is_latin(ch: str) -> bool:
    try:
        return "LATIN" in unicodedata.name(ch)
    except ValueError:
        return False


def detect_language(message: str) -> LanguageDetection:
    """
    Guess whether a message is English, another language, or mixed script.

    Letters outside the Latin script count as non-English; mixing them with
    Latin letters marks the message as mixed. Latin-script messages are
    flagged non-English when foreign function words outnumber English ones.
    """
    letters = [ch for ch in message if ch.isalpha()]
    latin = sum(1 for ch in letters if _is_latin(ch))
    other = len(letters) - latin

    if other and latin:
        return LanguageDetection(language="mixed", has_mixed_languages=True)
    if other:
        return LanguageDetection(language="other")

    words = re.findall(r"[a-zà-ÿ]+", message.lower())
    foreign = sum(1 for w in words if w in _FOREIGN_FUNCTION_WORDS)
    english = sum(1 for w in words if w in _ENGLISH_FUNCTION_WORDS)
    if foreign >= 2 and foreign > english:
        return LanguageDetection(language="other")
    return LanguageDetection(language="en")


def detect_short_timeframe(message: str) -> bool:
    """True for hour/minute durations ("3 hours") or an explicit day trip."""
    return bool(_SHORT_TIMEFRAME_RE.search(message))


def is_explicit_search(message: str) -> bool:
    return bool(EXPLICIT_SEARCH_RE.search(message))


def _is_emoji_only(message: str) -> bool:
    stripped = "".join(message.split())
    if not stripped or any(ch.isalnum() for ch in stripped):
        return False
    return any(unicodedata.category(ch) == "So" for ch in stripped)


def _is_gibberish(message: str) -> bool:
    stripped = message.strip()
    if not stripped:
        return True
    if not any(ch.isalpha() for ch in stripped):
        return True
    words = re.findall(r"[A-Za-z]+", stripped)
    if len(words) == 1 and len(words[0]) >= 6:
        word = words[0].lower()
        vowels = sum(1 for ch in word if ch in "aeiouy")
        return vowels / len(word) < 0.2
    return False


def classify_content_heuristic(message: str) -> ContentClassification:
    """Regex classification used when the LLM is unavailable."""
    explicit = is_explicit_search(message)
    mixed = detect_language(message).has_mixed_languages

    if _is_emoji_only(message):
        content_type = "emoji_only"
    elif _is_gibberish(message):
        content_type = "gibberish"
    elif _SYSTEM_RE.search(message):
        content_type = "system"
    elif _REFINEMENT_RE.search(message) and len(message.split()) <= 8:
        content_type = "refinement"
    elif _BUDGET_RE.search(message):
        content_type = "budget"
    elif _FLIGHT_RE.search(message):
        content_type = "flight"
    elif _RESTAURANT_RE.search(message):
        content_type = "restaurant"
    elif _UNRELATED_RE.search(message) and not _TRAVEL_RE.search(message):
        content_type = "unrelated"
    else:
        content_type = "travel"

    return ContentClassification(
        content_type=content_type,
        is_explicit_search=explicit,
        has_mixed_languages=mixed,
        needs_web_search=explicit or content_type in ("flight", "restaurant"),
        confidence=0.6,
    )


def classify_content_llm(message: str) -> Optional[ContentClassification]:
    """Ask the LLM to classify the message; None when it cannot."""
    try:
        data = get_llm_json(CONTENT_CLASSIFICATION_PROMPT.format(message=message))
        return ContentClassification.model_validate(data)
    except (ParseError, ValidationError) as e:
        logger.debug(f"Content classification reply rejected: {e}")
    except Exception as e:
        logger.debug(f"Content classification LLM call failed: {e}")
    return None


def classify_content(message: str) -> ContentClassification:
    """
    Classify a message before routing.

    The LLM answer wins when it is valid; the regex fallback covers
    outages and malformed replies. Explicit search phrasing is always
    honoured, whatever the LLM says.
    """
    result = classify_content_llm(message)
    if result is None:
        result = classify_content_heuristic(message)
    elif not result.is_explicit_search and is_explicit_search(message):
        result = result.model_copy(update={"is_explicit_search": True, "needs_web_search": True})
    logger.debug(f"Content classification: {result.model_dump()}")
    return result
