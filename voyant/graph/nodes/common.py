"""Helpers shared by the turn graph nodes."""

from typing import Any, Dict, List, Optional

from voyant.graph.state import TurnState


# Fixed replies
TRAVEL_FOCUS_REPLY = (
    "I focus on travel planning. Is there something about weather, destinations, "
    "packing, or attractions I can help with?"
)
IDENTITY_REPLY = (
    "I'm an AI travel assistant. I can help you with weather, destinations, packing, "
    "and attractions. What would you like to know?"
)
SYSTEM_REPLY = "Which city and what dates are you planning to travel to?"

# Disclaimers prefixed to handler replies
LANGUAGE_WARNING = "I work better with English, but I'll try to help. "
DAY_TRIP_NOTE = "For such a short trip, you'll likely need minimal packing. "
BUDGET_DISCLAIMER = (
    "I can't help with budget planning or costs, but I can provide travel "
    "destination information. "
)

# Slot keys that only exist while a consent question is open
SEARCH_CONSENT_KEYS = ["awaiting_search_consent", "pending_search_query"]
DEEP_RESEARCH_CONSENT_KEYS = [
    "awaiting_deep_research_consent",
    "pending_deep_research_query",
    "complexity_reasoning",
]
WEB_SEARCH_CONSENT_KEYS = ["awaiting_web_search_consent", "pending_web_search_query"]
TRANSIENT_KEYS = SEARCH_CONSENT_KEYS + DEEP_RESEARCH_CONSENT_KEYS + WEB_SEARCH_CONSENT_KEYS


def log_prefix(state: TurnState, node: str) -> str:
    return f"[thread={state.get('thread_id', 'unknown')}] [graph=turn] [node={node}] "


def profile_slots(slots: Dict[str, str]) -> Dict[str, str]:
    """Slots without transient consent flags."""
    return {k: v for k, v in slots.items() if k not in TRANSIENT_KEYS}


def fact(source: str, key: str, value: Any, url: Optional[str] = None) -> Dict[str, Any]:
    return {"source": source, "key": key, "value": str(value), "url": url}


def finish(
    node: str,
    reply: str,
    citations: Optional[List[str]] = None,
    facts: Optional[List[Dict[str, Any]]] = None,
    decisions: Optional[List[str]] = None,
    disclaimers: str = "",
) -> Dict[str, Any]:
    """State update that ends the turn with a reply."""
    return {
        "reply": f"{disclaimers}{reply}" if disclaimers else reply,
        "citations": citations or [],
        "facts": facts or [],
        "decisions": decisions or [],
        "next_node": "done",
        "messages": [{"role": "assistant", "node": node, "content": reply}],
    }


def handoff(node: str, next_node: str, **updates: Any) -> Dict[str, Any]:
    """State update that passes the turn to ``next_node``."""
    update = dict(updates)
    update["next_node"] = next_node
    update.setdefault("messages", [])
    update["messages"] = update["messages"] + [
        {"role": "system", "node": node, "content": f"{node} -> {next_node}"}
    ]
    return update
