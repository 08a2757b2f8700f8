"""
Consent detection for two-turn handshakes.

The assistant sometimes asks "Would you like me to search the web?" and
stores the pending query. The next message is checked here: is it a yes,
a no, or a new question altogether?
"""

import logging
import re
from typing import Literal

from voyant.shared.llm.client import get_llm_response
from voyant.prompts.templates import CONSENT_DETECTOR_PROMPT


logger = logging.getLogger(__name__)

Consent = Literal["yes", "no", "unclear"]

_PLAIN_YES = {
    "yes", "y", "yeah", "yep", "yup", "sure", "ok", "okay", "please",
    "go ahead", "do it", "yes please", "sounds good",
}
_PLAIN_NO = {"no", "n", "nope", "nah", "no thanks", "no thank you", "not now"}

_BARE_CONSENT_RE = re.compile(r"^(yes|no|y|n|sure|ok|okay|nope)$", re.IGNORECASE)
_QUESTION_START_RE = re.compile(
    r"^(what|where|how|when|which|who|why|can|should|do|is|are)", re.IGNORECASE
)

CONTEXT_SWITCH_OVERLAP = 0.2


def _plain_consent(message: str) -> Consent:
    normalized = re.sub(r"[.!?,]+$", "", message.lower().strip())
    if normalized in _PLAIN_YES:
        return "yes"
    if normalized in _PLAIN_NO:
        return "no"
    return "unclear"


def detect_consent(message: str) -> Consent:
    """
    Classify a reply to a yes/no question.

    The LLM is asked first; its answer counts when it contains a standalone
    "yes" or "no". Otherwise only very plain replies are recognised.
    """
    try:
        answer = get_llm_response(CONSENT_DETECTOR_PROMPT.format(message=message)).lower()
        logger.debug(f"Consent LLM answer: {answer!r} for message {message!r}")
        if re.search(r"\byes\b", answer):
            return "yes"
        if re.search(r"\bno\b", answer):
            return "no"
    except Exception as e:
        logger.debug(f"Consent LLM call failed, using plain matching: {e}")

    return _plain_consent(message)


def is_context_switch(current: str, pending: str) -> bool:
    """
    Decide whether ``current`` is a new question rather than a reply.

    Only messages that open with a question word are candidates. For those,
    the overlap of words longer than two characters is compared with the
    pending query; below 20% counts as a switch.
    """
    current_norm = current.lower().strip()
    pending_norm = pending.lower().strip()

    if current_norm == pending_norm:
        return False
    if _BARE_CONSENT_RE.match(current_norm):
        return False
    if not _QUESTION_START_RE.match(current_norm):
        return False

    current_words = {w for w in current_norm.split() if len(w) > 2}
    pending_words = {w for w in pending_norm.split() if len(w) > 2}
    denominator = max(len(current_words), len(pending_words))
    if denominator == 0:
        return False

    overlap = len(current_words & pending_words) / denominator
    switched = overlap < CONTEXT_SWITCH_OVERLAP
    logger.info(
        f"Context switch check | overlap={overlap:.2f}, switched={switched}, "
        f"current={current!r}, pending={pending!r}"
    )
    return switched
