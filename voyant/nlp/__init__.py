"""
Language understanding for the assistant.

Modules:
- parsers: LLM-first city, date, origin/destination and intent parsers
- classifier: content classification, language and timeframe signals
- router: intent routing and complexity detection
- consent: yes/no detection and context-switch checks
- clarifier: clarifying questions for missing slots
- search_query: search query optimization
"""

from voyant.nlp.router import route_intent, detect_complexity
from voyant.nlp.classifier import classify_content
from voyant.nlp.consent import detect_consent, is_context_switch
from voyant.nlp.clarifier import build_clarifying_question
from voyant.nlp.search_query import optimize_search_query

__all__ = [
    "route_intent",
    "detect_complexity",
    "classify_content",
    "detect_consent",
    "is_context_switch",
    "build_clarifying_question",
    "optimize_search_query",
]
