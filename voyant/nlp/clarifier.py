"""Clarifying questions for missing slots."""

import json
import logging
import re
from typing import Dict, List, Optional

from voyant.shared.llm.client import get_llm_response
from voyant.prompts.templates import CLARIFIER_PROMPT


logger = logging.getLogger(__name__)

_PROVIDER_ERROR_RE = re.compile(r"technical difficulties|try again|error", re.IGNORECASE)


def fallback_question(missing: List[str]) -> str:
    missing_set = {m.lower() for m in missing}
    if "city" in missing_set and "dates" in missing_set:
        return "Could you share the city and month/dates?"
    if "dates" in missing_set:
        return "Which month or travel dates?"
    if "city" in missing_set:
        return "Which city are you asking about?"
    return "Could you provide more details about your travel plans?"


def build_clarifying_question(
    missing: List[str], context: Optional[Dict[str, str]] = None
) -> str:
    """
    Ask the user for the missing slots.

    The LLM question is used only when it names every missing slot and
    does not read like a provider error; otherwise a fixed question is
    returned.
    """
    try:
        question = get_llm_response(
            CLARIFIER_PROMPT.format(
                missing_slots=json.dumps(missing), context=json.dumps(context or {})
            )
        ).strip()
    except Exception as e:
        logger.debug(f"Clarifier LLM call failed: {e}")
        return fallback_question(missing)

    lowered = question.lower()
    covers_all = all(m.lower() in lowered for m in missing)
    if question and covers_all and not _PROVIDER_ERROR_RE.search(lowered):
        return question
    logger.debug(f"Clarifier reply rejected: {question!r}")
    return fallback_question(missing)
