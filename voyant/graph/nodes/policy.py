"""
Policy node.

Answers baggage, visa and refund questions from the internal knowledge
base. When the knowledge base has nothing, the user is offered a web
search on the next turn.
"""

import logging
from typing import Any, Dict

from voyant.graph.state import TurnState
from voyant.graph.nodes.common import fact, finish, handoff, log_prefix
from voyant.memory import update_thread_slots
from voyant.tools import policy_kb


logger = logging.getLogger(__name__)

NO_RESULTS_REPLY = (
    "I couldn't find information about this in our internal knowledge base. \n\n"
    "Would you like me to search the web for current information? This will take a "
    "bit longer but may provide more comprehensive results.\n\n"
    "Type 'yes' to proceed with web search, or ask me something else."
)


def policy_node(state: TurnState) -> Dict[str, Any]:
    _log = log_prefix(state, "policy")
    message = state["message"]
    logger.info(f"{_log}Entering node | question={message[:80]!r}")

    try:
        answer = policy_kb.answer_policy_question(message)
    except Exception as e:
        logger.warning(f"{_log}Knowledge base lookup failed, falling back to web search: {e}")
        return handoff(
            "policy",
            "web_search",
            search_query=message,
            errors=[f"policy: {e}"],
            decisions=["Knowledge base lookup failed; falling back to web search"],
        )

    if not answer.citations:
        update_thread_slots(
            state["thread_id"],
            {"awaiting_web_search_consent": "true", "pending_web_search_query": message},
        )
        logger.info(f"{_log}No knowledge base answer, asked for web search consent")
        return finish(
            "policy",
            NO_RESULTS_REPLY,
            facts=[fact(policy_kb.SOURCE_NAME, "no_results", message)],
            decisions=["Knowledge base had no answer; asked for web search consent"],
        )

    sources = "\n".join(
        f"{i}. {c.title} - {c.url}" if c.url else f"{i}. {c.title}"
        for i, c in enumerate(answer.citations, start=1)
    )
    return finish(
        "policy",
        f"{answer.answer}\n\nSources:\n{sources}",
        citations=[c.url or c.title for c in answer.citations],
        facts=[fact(policy_kb.SOURCE_NAME, "policy", c.snippet, c.url) for c in answer.citations],
        decisions=[f"Answered from {len(answer.citations)} knowledge base sections"],
    )
