"""
Turn runner.

Runs one user message through the turn graph and records the receipts
behind the reply. The "/why" command is answered from those receipts
without running the graph.
"""

import logging
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from voyant.graph.build import create_turn_graph
from voyant.memory import get_last_receipts, set_last_receipts
from voyant.shared.config import AssistantConfig, get_config
from voyant.shared.contracts import Receipts


logger = logging.getLogger(__name__)

WHY_COMMAND = "/why"
EMPTY_REPLY = "Sorry, I couldn't come up with an answer. Could you rephrase that?"


class ChatResult(BaseModel):
    """Outcome of one chat turn."""

    thread_id: str
    reply: str
    citations: List[str] = Field(default_factory=list)
    receipts: Optional[Receipts] = Field(
        default=None, description="Facts and decisions behind the reply, when requested"
    )


# Compiled graph instance (shared across turns)
_graph = None


def get_turn_graph():
    """Get or create the shared turn graph."""
    global _graph
    if _graph is None:
        _graph = create_turn_graph()
    return _graph


def run_turn(
    message: str,
    thread_id: str,
    config: Optional[AssistantConfig] = None,
) -> ChatResult:
    """
    Run one message through the turn graph.

    Args:
        message: User message
        thread_id: Conversation thread identifier
        config: Per-turn configuration (default: environment configuration)

    Returns:
        ChatResult with the reply and citations. The facts and decisions
        of the turn are stored as the thread's last receipts.
    """
    config = config or get_config()
    _log = f"[thread={thread_id}] [graph=turn] [api=run_turn] "
    logger.info(f"{_log}Turn starting | message={message[:80]!r}")

    initial_state = {
        "thread_id": thread_id,
        "message": message,
        "facts": [],
        "decisions": [],
        "errors": [],
        "messages": [{"role": "user", "node": "input", "content": message}],
    }
    if not config.deep_research:
        initial_state["skip_deep_research"] = True
    final_state = get_turn_graph().invoke(
        initial_state, config={"recursion_limit": config.recursion_limit}
    )

    reply = final_state.get("reply") or EMPTY_REPLY
    facts = final_state.get("facts", [])
    decisions = final_state.get("decisions", [])
    set_last_receipts(thread_id, facts, decisions, reply)

    logger.info(
        f"{_log}Turn finished | facts={len(facts)}, decisions={len(decisions)}, "
        f"errors={len(final_state.get('errors', []))}, "
        f"nodes={[m.get('node') for m in final_state.get('messages', [])]}"
    )
    return ChatResult(
        thread_id=thread_id,
        reply=reply,
        citations=final_state.get("citations", []),
    )


def handle_chat(
    message: str,
    thread_id: Optional[str] = None,
    receipts: bool = False,
    config: Optional[AssistantConfig] = None,
) -> ChatResult:
    """
    Handle a chat message.

    Args:
        message: User message; "/why" explains the previous answer
        thread_id: Existing thread id, or None to start a new thread
        receipts: Attach the turn's receipts to the result
        config: Per-turn configuration overrides, see ``get_config``

    Returns:
        ChatResult for the turn
    """
    thread_id = thread_id or str(uuid.uuid4())

    if message.strip().lower() == WHY_COMMAND:
        last = get_last_receipts(thread_id) or Receipts()
        logger.info(f"[thread={thread_id}] [graph=turn] [api=handle_chat] Receipts requested")
        return ChatResult(
            thread_id=thread_id,
            reply=last.format(),
            citations=last.sources,
            receipts=last if receipts else None,
        )

    result = run_turn(message, thread_id, config)
    if receipts:
        result.receipts = get_last_receipts(thread_id)
    return result
