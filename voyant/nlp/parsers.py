"""
LLM-first parsers with deterministic fallbacks.

Each parser asks the LLM for a JSON answer, validates it with a pydantic
model, and falls through to regex heuristics whenever the LLM is
unavailable, returns something invalid, or is not confident enough.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from voyant.shared.llm.client import get_llm_json
from voyant.prompts.templates import (
    CITY_LIST_PROMPT,
    CITY_PARSER_PROMPT,
    DATE_PARSER_PROMPT,
    INTENT_PARSER_PROMPT,
    ORIGIN_DESTINATION_PROMPT,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Vocabulary
# =============================================================================

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
]

MONTH_WORDS = [m.lower() for m in MONTH_NAMES] + [
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
]

TEMPORAL_WORDS = MONTH_WORDS + [
    "today", "tomorrow", "yesterday", "now", "next", "last", "this",
    "week", "month", "year", "morning", "afternoon", "evening", "night",
]

CITY_PLACEHOLDERS = ["unknown", "clean_city_name", "there", "normalized_name"]

DATE_PLACEHOLDERS = ["unknown", "next week", "normalized_date_string", "month_name"]

# Words that start a sentence with a capital letter but never name a city
_CITY_STOPLIST = {
    "hey", "hi", "hello", "thanks", "thank you", "ok", "okay",
    "what", "where", "when", "why", "how", "which", "who",
}

_IMMEDIATE_RE = re.compile(
    r"\b(?:right now|at the moment|currently|today|now)\b", re.IGNORECASE
)

_MONTH_ONLY_RE = re.compile(
    r"^(?:january|february|march|april|may|june|july|august|september|october"
    r"|november|december|jan|feb|mar|apr|jun|jul|aug|sept?|oct|nov|dec)\.?$",
    re.IGNORECASE,
)

# Lower-case "may" is almost always the verb, so only the capitalized form counts
_MONTH_RE = re.compile(
    r"\b(?:(?i:january|february|march|april|june|july|august|september|october"
    r"|november|december|jan|feb|mar|apr|jun|jul|aug|sept?|oct|nov|dec)|May)\b"
)

_MONTH_LOOKUP_RE = re.compile(
    r"\b(january|february|march|april|may|june|july|august|september|october"
    r"|november|december|jan|feb|mar|apr|jun|jul|aug|sept?|oct|nov|dec)\b",
    re.IGNORECASE,
)

_DATE_PLACEHOLDER_RE = re.compile(
    r"placeholder|unknown|normalized_date_string|month_name", re.IGNORECASE
)

# A run of capitalized words, e.g. "Paris" or "New York"
_PROPER = r"([A-Z][A-Za-z\-]+(?:\s+[A-Z][A-Za-z\-]+)*)"
_PROPER_RE = re.compile(r"^[A-Z][A-Za-z\- ]+$")

_CITY_HEURISTICS = [
    re.compile(r"\b(?i:let'?s\s+say|lets\s+say|say|how\s+about|maybe|consider)\s+" + _PROPER),
    re.compile(_PROPER + r"\s+(?i:with\s+(?:a|the)\s+kids?)"),
    re.compile(r"\b(?i:in|to)\s+" + _PROPER),
]

# A verb opening a sentence, e.g. "Heading to Rome"; lists ("Beijing or Shanghai") are kept
_LEADING_VERB_RE = re.compile(
    r"(?:^|[.!?]\s+)([A-Z][a-z]+(?:ing|ed))\s+(?!(?:or|and|vs|versus)\b)\w"
)

_FROM_RE = re.compile(r"\b(?i:from|leaving)\s+" + _PROPER)
_TO_RE = re.compile(r"\b(?i:to)\s+" + _PROPER)
_IN_RE = re.compile(r"\b(?i:in)\s+" + _PROPER)

_INTENT_PATTERNS = [
    ("weather", re.compile(r"weather|temperature|forecast|climate")),
    ("packing", re.compile(r"pack|bring|wear|clothes|luggage")),
    ("attractions", re.compile(r"attraction|museum|do in|activities|visit")),
    ("destinations", re.compile(r"where to go|destination|recommend|suggest")),
]


# =============================================================================
# Result models
# =============================================================================

class ParseResult(BaseModel):
    """Outcome of a single parser call."""

    success: bool
    data: Optional[Dict[str, Any]] = None
    confidence: float = 0.0
    normalized: Optional[str] = None


class CityParse(BaseModel):
    city: str = Field(min_length=1)
    country: Optional[str] = None
    normalized: str = Field(min_length=1)
    confidence: float = Field(ge=0, le=1)


class DateParse(BaseModel):
    dates: str = Field(min_length=1)
    month: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    confidence: float = Field(ge=0, le=1)


class OriginDestinationParse(BaseModel):
    originCity: Optional[str] = None
    destinationCity: Optional[str] = None
    confidence: float = Field(ge=0, le=1)


class IntentParse(BaseModel):
    intent: Literal["weather", "destinations", "packing", "attractions", "unknown"]
    confidence: float = Field(ge=0, le=1)
    slots: Dict[str, Optional[str]] = Field(default_factory=dict)


class CityList(BaseModel):
    cities: List[str] = Field(default_factory=list)


_FAILED = ParseResult(success=False)


# =============================================================================
# Helpers
# =============================================================================

def _context_json(context: Optional[Dict[str, Any]]) -> str:
    return json.dumps(context or {})


def _first_segment(value: str) -> str:
    return re.split(r"[.,!?]", value, maxsplit=1)[0].strip()


def _strip_temporal_tail(candidate: str) -> str:
    """Drop trailing temporal words captured with a proper name ("Paris June")."""
    words = candidate.split()
    while words and words[-1].lower() in TEMPORAL_WORDS:
        words.pop()
    return " ".join(words)


def normalize_month(value: Optional[str]) -> Optional[str]:
    """Map "jun", "June" or "june 10-15" to the full month name."""
    if not value:
        return None
    match = _MONTH_LOOKUP_RE.search(value)
    if not match:
        return None
    prefix = match.group(1)[:3].lower()
    for name in MONTH_NAMES:
        if name[:3].lower() == prefix:
            return name
    return None


def current_month() -> str:
    return datetime.now().strftime("%B")


# =============================================================================
# City
# =============================================================================

def _city_from_heuristics(text: str) -> Optional[str]:
    for pattern in _CITY_HEURISTICS:
        for match in pattern.finditer(text):
            candidate = _strip_temporal_tail(_first_segment(match.group(1)))
            if not candidate or candidate.lower() in TEMPORAL_WORDS:
                continue
            if not _PROPER_RE.match(candidate) or candidate.lower() in _CITY_STOPLIST:
                continue
            return candidate
    return None


def parse_city(text: str, context: Optional[Dict[str, Any]] = None) -> ParseResult:
    """
    Extract a city from free text.

    Month-only input is rejected up front. The LLM answer is dropped when
    its confidence is below 0.5 or it normalizes to a placeholder or a
    month; the regex heuristics then get a chance at confidence 0.6.
    """
    if _MONTH_ONLY_RE.match(text.strip()):
        return _FAILED

    try:
        data = get_llm_json(CITY_PARSER_PROMPT.format(text=text, context=_context_json(context)))
        result = CityParse.model_validate(data)
        normalized = result.normalized.strip()
        if (
            result.confidence < 0.5
            or normalized.lower() in CITY_PLACEHOLDERS
            or normalized.lower() in MONTH_WORDS
        ):
            raise ValueError(f"Low confidence or placeholder city: {result.normalized!r}")
        return ParseResult(
            success=True,
            data=result.model_dump(),
            confidence=result.confidence,
            normalized=normalized,
        )
    except Exception as e:
        logger.debug(f"City parser LLM path failed, using heuristics: {e}")

    city = _city_from_heuristics(text)
    if city:
        logger.debug(f"City heuristic accepted: {city}")
        return ParseResult(
            success=True,
            data={"city": city, "normalized": city, "confidence": 0.6},
            confidence=0.6,
            normalized=city,
        )
    return _FAILED


# =============================================================================
# Dates
# =============================================================================

def parse_date(text: str, context: Optional[Dict[str, Any]] = None) -> ParseResult:
    """
    Extract travel dates or a month.

    Immediate references ("now", "today") resolve to the current month with
    full confidence before the LLM is consulted. Seasons are not dates.
    """
    if _IMMEDIATE_RE.search(text):
        month = current_month()
        return ParseResult(
            success=True,
            data={"dates": month, "month": month, "confidence": 1.0},
            confidence=1.0,
            normalized=month,
        )

    try:
        data = get_llm_json(DATE_PARSER_PROMPT.format(text=text, context=_context_json(context)))
        result = DateParse.model_validate(data)
        if result.confidence < 0.5 or _DATE_PLACEHOLDER_RE.search(result.dates):
            raise ValueError(f"Low confidence or placeholder dates: {result.dates!r}")
        payload = result.model_dump()
        if not payload.get("month"):
            payload["month"] = normalize_month(result.dates)
        return ParseResult(
            success=True,
            data=payload,
            confidence=result.confidence,
            normalized=result.dates,
        )
    except Exception as e:
        logger.debug(f"Date parser LLM path failed, using month regex: {e}")

    match = _MONTH_RE.search(text)
    if match:
        month = normalize_month(match.group(0)) or match.group(0)
        return ParseResult(
            success=True,
            data={"dates": month, "month": month, "confidence": 0.9},
            confidence=0.9,
            normalized=month,
        )
    return _FAILED


# =============================================================================
# Origin / destination
# =============================================================================

def _proper_match(pattern: re.Pattern, text: str) -> Optional[str]:
    for match in pattern.finditer(text):
        candidate = _strip_temporal_tail(match.group(1))
        if candidate and candidate.lower() not in _CITY_STOPLIST:
            return candidate
    return None


def parse_origin_destination(
    text: str, context: Optional[Dict[str, Any]] = None
) -> ParseResult:
    """Extract origin and destination cities ("from X to Y")."""
    try:
        data = get_llm_json(
            ORIGIN_DESTINATION_PROMPT.format(text=text, context=_context_json(context))
        )
        result = OriginDestinationParse.model_validate(data)
        if result.confidence > 0.5 and (result.originCity or result.destinationCity):
            return ParseResult(
                success=True,
                data=result.model_dump(),
                confidence=result.confidence,
            )
        raise ValueError("Low confidence origin/destination")
    except Exception as e:
        logger.debug(f"Origin/destination LLM path failed, using regex: {e}")

    origin = _proper_match(_FROM_RE, text)
    destination = _proper_match(_TO_RE, text) or _proper_match(_IN_RE, text)
    if origin or destination:
        return ParseResult(
            success=True,
            data={"originCity": origin, "destinationCity": destination, "confidence": 0.6},
            confidence=0.6,
        )
    return _FAILED


# =============================================================================
# Intent
# =============================================================================

def _intent_from_patterns(text: str, context: Dict[str, Any]) -> ParseResult:
    lowered = text.lower()
    for intent, pattern in _INTENT_PATTERNS:
        if pattern.search(lowered):
            return ParseResult(
                success=True,
                data={"intent": intent, "confidence": 0.8, "slots": dict(context)},
                confidence=0.8,
            )
    return ParseResult(
        success=True,
        data={"intent": "unknown", "confidence": 0.3, "slots": dict(context)},
        confidence=0.3,
    )


def parse_intent(text: str, context: Optional[Dict[str, Any]] = None) -> ParseResult:
    """
    Classify the travel intent of a message.

    Context slots are merged underneath the slots the LLM extracted.
    """
    context = context or {}
    context_info = (
        f"Previous context: {json.dumps(context)}. Use this context to fill missing slots."
        if context
        else ""
    )
    try:
        data = get_llm_json(INTENT_PARSER_PROMPT.format(text=text, context_info=context_info))
        result = IntentParse.model_validate(data)
        extracted = {k: v for k, v in result.slots.items() if isinstance(v, str) and v.strip()}
        merged = {**context, **extracted}
        return ParseResult(
            success=True,
            data={"intent": result.intent, "confidence": result.confidence, "slots": merged},
            confidence=result.confidence,
        )
    except Exception as e:
        logger.debug(f"Intent parser LLM path failed, using patterns: {e}")
        return _intent_from_patterns(text, context)


# =============================================================================
# Slots
# =============================================================================

def extract_slots(text: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    """
    Extract city, origin, dates and month from a message.

    A destination from the origin/destination parser only fills ``city``
    when the city parser found nothing.
    """
    slots: Dict[str, str] = {}

    city = parse_city(text, context)
    if city.success and city.normalized and city.confidence > 0.5:
        slots["city"] = city.normalized

    od = parse_origin_destination(text, context)
    if od.success and od.data:
        if od.data.get("originCity"):
            slots["originCity"] = od.data["originCity"]
        if not slots.get("city") and od.data.get("destinationCity"):
            slots["city"] = od.data["destinationCity"]

    date = parse_date(text, context)
    if date.success and date.data and date.data.get("dates") and date.confidence >= 0.5:
        slots["dates"] = date.data["dates"]
        if date.data.get("month"):
            slots["month"] = date.data["month"]

    return slots


def city_candidates(text: str, stoplist: List[str]) -> List[str]:
    """
    Capitalized word runs that may name a city.

    Stoplist and temporal words are trimmed from both ends of each run, so
    "Is Paris" yields "Paris" and "June" yields nothing.
    """
    lowered = {w.lower() for w in stoplist} | set(TEMPORAL_WORDS)
    candidates = []
    for run in re.findall(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b", text):
        words = run.split()
        while words and words[0].lower() in lowered:
            words.pop(0)
        while words and words[-1].lower() in lowered:
            words.pop()
        phrase = " ".join(words)
        if len(phrase) > 2 and phrase.lower() not in lowered and phrase not in candidates:
            candidates.append(phrase)
    return candidates


def _leading_verbs(text: str) -> set:
    return {m.group(1) for m in _LEADING_VERB_RE.finditer(text)}


def extract_cities(text: str, stoplist: List[str]) -> List[str]:
    """
    Every city named in a message, in order.

    The LLM list is used when available. Otherwise capitalized runs from
    ``city_candidates`` are kept, minus a verb that opens a sentence
    ("Heading to Rome", "Visiting Lisbon").
    """
    lowered = {w.lower() for w in stoplist} | set(TEMPORAL_WORDS)
    try:
        result = CityList.model_validate(get_llm_json(CITY_LIST_PROMPT.format(text=text)))
        cities = []
        for city in result.cities:
            city = city.strip()
            if city and city.lower() not in lowered and city.lower() not in CITY_PLACEHOLDERS:
                if city not in cities:
                    cities.append(city)
        return cities
    except Exception as e:
        logger.debug(f"City list LLM path failed, using capitalized words: {e}")

    verbs = _leading_verbs(text)
    cities = []
    for candidate in city_candidates(text, stoplist):
        words = candidate.split()
        if words[0] in verbs:
            words = words[1:]
        phrase = " ".join(words)
        if len(phrase) > 2 and phrase not in cities:
            cities.append(phrase)
    return cities
