"""
Routing logic for the turn graph.

Every node names its successor in ``next_node``; this module turns that
into the conditional edge target.
"""

import logging
from typing import Literal

from voyant.graph.state import TurnState


logger = logging.getLogger(__name__)

NodeName = Literal[
    "consent",
    "conflicts",
    "route",
    "weather",
    "destinations",
    "packing",
    "attractions",
    "policy",
    "web_search",
    "deep_research",
    "system",
    "unknown",
    "done",
]

HANDLER_NODES = (
    "weather",
    "destinations",
    "packing",
    "attractions",
    "policy",
    "web_search",
    "deep_research",
    "system",
    "unknown",
)

ALL_NODES = ("consent", "conflicts", "route") + HANDLER_NODES


def route_next_node(state: TurnState) -> NodeName:
    """
    Return the node to run next.

    A reply always ends the turn. An unknown or missing ``next_node`` falls
    back to the general-purpose ``unknown`` handler.
    """
    thread_id = state.get("thread_id", "unknown")
    _log = f"[thread={thread_id}] [graph=turn] [router=route_next_node] "

    if state.get("reply") is not None:
        logger.info(f"{_log}Reply ready -> done")
        return "done"

    next_node = state.get("next_node")
    if next_node not in ALL_NODES:
        logger.warning(f"{_log}Unexpected next_node={next_node!r} -> unknown")
        return "unknown"

    logger.info(f"{_log}Routing to {next_node!r}")
    return next_node
