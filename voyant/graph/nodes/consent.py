"""
Consent node.

Resolves open consent questions from the previous turn. Three handshakes
are checked in order: web search for flight-style questions, deep research
for complex planning queries, and web search after an empty policy lookup.
"""

import logging
from typing import Any, Dict

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import (
    DEEP_RESEARCH_CONSENT_KEYS,
    SEARCH_CONSENT_KEYS,
    WEB_SEARCH_CONSENT_KEYS,
    finish,
    handoff,
    log_prefix,
    profile_slots,
)
from voyant.memory import clear_slot_keys, get_thread_slots
from voyant.nlp.consent import detect_consent, is_context_switch
from voyant.nlp.search_query import optimize_search_query
from voyant.shared.logging import log_state_transition


logger = logging.getLogger(__name__)

DECLINED_SEARCH_REPLY = "No problem! Is there something else about travel planning I can help with?"
DECLINED_WEB_SEARCH_REPLY = "Understood. Feel free to ask me anything else!"


def _clear(state: TurnState, keys, _log: str) -> Dict[str, str]:
    clear_slot_keys(state["thread_id"], keys)
    logger.info(f"{_log}Cleared consent flags {keys}")
    log_state_transition("consent_cleared", state, extra={"keys": list(keys)}, logger=logger)
    return get_thread_slots(state["thread_id"])


def consent_node(state: TurnState) -> Dict[str, Any]:
    """
    Handle a reply to a pending consent question.

    Returns:
        A web-search or deep-research handoff on "yes", a closing reply on
        "no" (or, for deep research, the pending query routed normally),
        and a handoff to the conflicts node when nothing is pending or the
        reply is unclear.
    """
    _log = log_prefix(state, "consent")
    message = state["message"]
    slots = dict(state.get("slots") or {})

    # (a) Web search consent for flight/airline questions
    pending_search = slots.get("pending_search_query")
    if slots.get("awaiting_search_consent") == "true" and pending_search:
        consent = detect_consent(message)
        logger.info(f"{_log}Search consent reply | consent={consent}, pending={pending_search!r}")
        if consent != "unclear":
            slots = _clear(state, SEARCH_CONSENT_KEYS, _log)
            if consent == "yes":
                query = optimize_search_query(pending_search, profile_slots(slots), "web_search")
                return handoff(
                    "consent",
                    "web_search",
                    slots=slots,
                    search_query=query,
                    decisions=[f"User agreed to a web search for: \"{pending_search}\""],
                )
            return finish(
                "consent",
                DECLINED_SEARCH_REPLY,
                decisions=["User declined the web search"],
            )

    # (b) Deep research consent for complex planning queries
    pending_research = slots.get("pending_deep_research_query")
    if slots.get("awaiting_deep_research_consent") == "true" and pending_research:
        if is_context_switch(message, pending_research):
            logger.info(f"{_log}Context switch detected, dropping deep research consent")
            slots = _clear(state, DEEP_RESEARCH_CONSENT_KEYS, _log)
        else:
            consent = detect_consent(message)
            logger.info(f"{_log}Deep research consent reply | consent={consent}")
            if consent != "unclear":
                slots = _clear(state, DEEP_RESEARCH_CONSENT_KEYS, _log)
                if consent == "yes":
                    return handoff(
                        "consent",
                        "deep_research",
                        slots=slots,
                        pending_deep_research_query=pending_research,
                        decisions=["User agreed to deep research"],
                    )
                # Declined: answer the original question the standard way
                return handoff(
                    "consent",
                    "route",
                    slots=slots,
                    message=pending_research,
                    skip_deep_research=True,
                    decisions=["User declined deep research; routing the original query"],
                )

    # (c) Web search consent after an empty knowledge-base lookup
    pending_web = slots.get("pending_web_search_query")
    if slots.get("awaiting_web_search_consent") == "true" and pending_web:
        consent = detect_consent(message)
        logger.info(f"{_log}Web search consent reply | consent={consent}, pending={pending_web!r}")
        if consent != "unclear":
            slots = _clear(state, WEB_SEARCH_CONSENT_KEYS, _log)
            if consent == "yes":
                return handoff(
                    "consent",
                    "web_search",
                    slots=slots,
                    search_query=optimize_search_query(pending_web, profile_slots(slots), "policy"),
                    decisions=[f"User agreed to search the web for: \"{pending_web}\""],
                )
            return finish(
                "consent",
                DECLINED_WEB_SEARCH_REPLY,
                decisions=["User declined the web search after an empty policy lookup"],
            )

    return handoff("consent", "conflicts", slots=slots)
