"""System and unknown intent nodes."""

import logging
from typing import Any, Dict

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import SYSTEM_REPLY, TRAVEL_FOCUS_REPLY, finish, log_prefix
from voyant.prompts.templates import BLEND_SYSTEM_PROMPT, UNKNOWN_BLEND_PROMPT
from voyant.shared.llm.client import get_llm_response


logger = logging.getLogger(__name__)


def system_node(state: TurnState) -> Dict[str, Any]:
    logger.info(f"{log_prefix(state, 'system')}Entering node")
    return finish("system", SYSTEM_REPLY, decisions=["Asked for city and dates"])


def unknown_node(state: TurnState) -> Dict[str, Any]:
    """General travel reply for messages no handler covers."""
    _log = log_prefix(state, "unknown")
    logger.info(f"{_log}Entering node")

    try:
        reply = get_llm_response(
            UNKNOWN_BLEND_PROMPT.format(message=state["message"]),
            system_prompt=BLEND_SYSTEM_PROMPT,
        ).strip()
    except Exception as e:
        logger.debug(f"{_log}General reply failed, using fixed reply: {e}")
        reply = ""

    return finish(
        "unknown",
        reply or TRAVEL_FOCUS_REPLY,
        decisions=["No specific handler; general travel reply" if reply else "No specific handler; fixed reply"],
        disclaimers=state.get("disclaimers", ""),
    )
