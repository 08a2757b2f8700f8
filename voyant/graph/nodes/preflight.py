"""
Preflight node.

First stop for every message: rejects off-topic input, answers identity
questions, and computes the disclaimers that later prefix handler replies.
"""

import logging
from typing import Any, Dict

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import (
    BUDGET_DISCLAIMER,
    DAY_TRIP_NOTE,
    IDENTITY_REPLY,
    LANGUAGE_WARNING,
    TRAVEL_FOCUS_REPLY,
    finish,
    handoff,
    log_prefix,
)
from voyant.memory import get_thread_slots
from voyant.nlp.classifier import classify_content, detect_language, detect_short_timeframe
from voyant.shared.logging import log_state_transition


logger = logging.getLogger(__name__)

OFF_TOPIC_TYPES = ("unrelated", "gibberish", "emoji_only")


def preflight_node(state: TurnState) -> Dict[str, Any]:
    """
    Classify the message and prepare disclaimers.

    Args:
        state: Current turn state (message and thread_id set)

    Returns:
        A finished reply for off-topic or identity messages, otherwise a
        handoff to the consent node with disclaimers and the thread slots.
    """
    _log = log_prefix(state, "preflight")
    message = state["message"]
    logger.info(f"{_log}Entering node | message={message[:80]!r}")

    classification = classify_content(message)
    content_type = classification.content_type
    logger.info(
        f"{_log}Content classified | type={content_type}, "
        f"explicit_search={classification.is_explicit_search}"
    )

    if content_type in OFF_TOPIC_TYPES:
        return finish(
            "preflight",
            TRAVEL_FOCUS_REPLY,
            decisions=[f"Message classified as {content_type}; steered back to travel"],
        )

    if content_type == "system":
        return finish(
            "preflight",
            IDENTITY_REPLY,
            decisions=["Identity question answered without routing"],
        )

    language = detect_language(message)
    short_timeframe = detect_short_timeframe(message)

    disclaimers = ""
    if language.has_mixed_languages or classification.has_mixed_languages or language.language != "en":
        disclaimers += LANGUAGE_WARNING
    if short_timeframe:
        disclaimers += DAY_TRIP_NOTE
    if content_type == "budget":
        disclaimers += BUDGET_DISCLAIMER

    update = handoff(
        "preflight",
        "consent",
        content_type=content_type,
        disclaimers=disclaimers,
        short_timeframe=short_timeframe,
        slots=get_thread_slots(state["thread_id"]),
    )
    log_state_transition(
        "preflight_complete",
        {**state, **update},
        extra={"content_type": content_type, "language": language.language},
        logger=logger,
    )
    return update
