"""
Intent router.

Turns a user message plus the thread's known slots into a RouteResult.
Explicit search requests and policy questions are recognised by phrase;
everything else goes to the LLM router, with the intent parser and slot
extractors as the fallback.
"""

import json
import logging
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from voyant.shared.config import DEFAULT_CONFIG
from voyant.shared.contracts.route import Intent, RouteResult
from voyant.shared.llm.client import get_llm_json
from voyant.nlp.classifier import is_explicit_search
from voyant.nlp.parsers import extract_slots, parse_intent
from voyant.prompts.templates import ROUTER_PROMPT


logger = logging.getLogger(__name__)


POLICY_RE = re.compile(
    r"\b(visas?|passports?|baggage|luggage allowance|carry[- ]on|refunds?|cancell?ations?"
    r"|cancel|insurance|customs|entry requirements?|check[- ]in policy)\b",
    re.IGNORECASE,
)

CITY_INTENTS = ("weather", "packing", "attractions", "destinations")
DATE_INTENTS = ("destinations", "packing")

# Planning constraint -> pattern. Three or more distinct hits make a query complex.
_CONSTRAINTS = [
    ("budget", re.compile(r"\b(budget|cheap|affordable|under \$?\d+|cost)\b|\$\d+", re.I)),
    (
        "travel party",
        re.compile(
            r"\b(kids?|children|toddler|family|adults?|couple|\d+\s+(?:people|travell?ers|friends))\b",
            re.I,
        ),
    ),
    ("trip duration", re.compile(r"\b\d+\s*-?\s*(days?|nights?|weeks?)\b|\b(weekend|week-long)\b", re.I)),
    ("origin city", re.compile(r"\bfrom\s+[A-Z][a-z]+")),
    (
        "dislikes",
        re.compile(r"\b(don'?t like|do not like|dislikes?|hate|avoid|not into|no crowds)\b", re.I),
    ),
]

_INTERESTS_RE = re.compile(
    r"\b(beach(?:es)?|museums?|hiking|food|nightlife|culture|history|shopping|nature"
    r"|art|wine|skiing|diving|architecture)\b",
    re.IGNORECASE,
)


class ComplexityAssessment(BaseModel):
    """Whether a query bundles enough constraints to warrant deep research."""

    is_complex: bool
    constraints: List[str] = Field(default_factory=list)
    reasoning: str = ""


class _LLMRoute(BaseModel):
    intent: Intent
    confidence: float = Field(ge=0, le=1)
    slots: Dict[str, Optional[str]] = Field(default_factory=dict)
    needExternal: bool = False


def detect_complexity(message: str) -> ComplexityAssessment:
    """
    Count distinct planning constraints in a message.

    Constraints are budget, travel party, trip duration, origin city,
    dislikes, and two or more interests.
    """
    constraints = [name for name, pattern in _CONSTRAINTS if pattern.search(message)]
    interests = {m.lower() for m in _INTERESTS_RE.findall(message)}
    if len(interests) >= 2:
        constraints.append("multiple interests")

    is_complex = len(constraints) >= 3
    reasoning = (
        f"Detected {len(constraints)} planning constraints: {', '.join(constraints)}."
        if is_complex
        else ""
    )
    return ComplexityAssessment(is_complex=is_complex, constraints=constraints, reasoning=reasoning)


def compute_missing_slots(intent: str, slots: Dict[str, str]) -> List[str]:
    missing = []
    if intent in CITY_INTENTS and not slots.get("city"):
        missing.append("city")
    if intent in DATE_INTENTS and not slots.get("dates") and not slots.get("month"):
        missing.append("dates")
    return missing


def _clean_slots(raw: Dict[str, Optional[str]]) -> Dict[str, str]:
    return {k: v.strip() for k, v in raw.items() if isinstance(v, str) and v.strip()}


def _route_with_llm(message: str, context: Dict[str, str]) -> Optional[RouteResult]:
    try:
        data = get_llm_json(ROUTER_PROMPT.format(message=message, context=json.dumps(context)))
        route = _LLMRoute.model_validate(data)
    except Exception as e:
        logger.debug(f"LLM router unavailable, falling back to parsers: {e}")
        return None

    if route.confidence < 0.5:
        logger.debug(f"LLM router confidence too low ({route.confidence}), falling back")
        return None

    slots = _clean_slots(route.slots)
    missing = compute_missing_slots(route.intent, {**context, **slots})
    return RouteResult(
        intent=route.intent,
        confidence=route.confidence,
        slots=slots,
        missing_slots=missing,
        need_external=route.needExternal,
    )


def _route_with_parsers(message: str, context: Dict[str, str]) -> RouteResult:
    parsed = parse_intent(message, context)
    data = parsed.data or {}
    intent = data.get("intent", "unknown")

    # Slots the intent parser found beyond the context, then the extractors
    slots = {
        k: v for k, v in _clean_slots(data.get("slots", {})).items()
        if context.get(k) != v
    }
    slots.update(extract_slots(message, context))

    missing = compute_missing_slots(intent, {**context, **slots})
    return RouteResult(
        intent=intent,
        confidence=parsed.confidence or 0.4,
        slots=slots,
        missing_slots=missing,
        need_external=intent != "unknown" and not missing,
    )


def route_intent(
    message: str,
    context: Optional[Dict[str, str]] = None,
    allow_deep_research: bool = True,
) -> RouteResult:
    """
    Route one message.

    Args:
        message: The user's message
        context: Slots already known for the thread
        allow_deep_research: When False, complex queries are routed normally
            instead of requesting deep-research consent

    Returns:
        RouteResult with the intent, newly extracted slots and missing slots.
        A complex planning query carries ``deep_research_consent_needed`` and
        ``complexity_reasoning`` in its slots.
    """
    context = dict(context or {})

    if is_explicit_search(message):
        logger.info(f"Explicit search phrasing -> web_search | message={message!r}")
        return RouteResult(intent="web_search", confidence=0.9, need_external=True)

    if POLICY_RE.search(message):
        logger.info(f"Policy phrasing -> policy | message={message!r}")
        return RouteResult(intent="policy", confidence=0.85, need_external=True)

    if allow_deep_research and DEFAULT_CONFIG.deep_research:
        complexity = detect_complexity(message)
        if complexity.is_complex:
            logger.info(f"Complex planning query | {complexity.reasoning}")
            return RouteResult(
                intent="destinations",
                confidence=0.8,
                slots={
                    "deep_research_consent_needed": "true",
                    "complexity_reasoning": complexity.reasoning,
                },
                need_external=True,
            )

    route = _route_with_llm(message, context)
    if route is None:
        route = _route_with_parsers(message, context)

    logger.info(
        f"Routed message | intent={route.intent}, confidence={route.confidence:.2f}, "
        f"slots={route.slots}, missing={route.missing_slots}"
    )
    return route
