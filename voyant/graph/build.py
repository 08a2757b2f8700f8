"""
Turn graph construction.

Builds the graph that handles one user message:
    preflight -> consent -> conflicts -> route -> <handler> [-> web_search]
Any node can end the turn by producing a reply.
"""

import logging

from langgraph.graph import StateGraph, END

from voyant.graph.state import TurnState
from voyant.graph.router import ALL_NODES, route_next_node
from voyant.graph.nodes import (
    attractions_node,
    conflicts_node,
    consent_node,
    deep_research_node,
    destinations_node,
    packing_node,
    policy_node,
    preflight_node,
    route_node,
    system_node,
    unknown_node,
    weather_node,
    web_search_node,
)


logger = logging.getLogger(__name__)

NODE_FUNCTIONS = {
    "preflight": preflight_node,
    "consent": consent_node,
    "conflicts": conflicts_node,
    "route": route_node,
    "weather": weather_node,
    "destinations": destinations_node,
    "packing": packing_node,
    "attractions": attractions_node,
    "policy": policy_node,
    "web_search": web_search_node,
    "deep_research": deep_research_node,
    "system": system_node,
    "unknown": unknown_node,
}


def create_turn_graph():
    """
    Create and compile the turn graph.

    Every node is followed by ``route_next_node``, which reads the node's
    ``next_node`` and maps "done" to END.

    Returns:
        Compiled LangGraph application ready for execution.
    """
    graph = StateGraph(TurnState)

    for name, fn in NODE_FUNCTIONS.items():
        graph.add_node(name, fn)

    graph.set_entry_point("preflight")

    edges = {name: name for name in ALL_NODES}
    edges["done"] = END
    for name in NODE_FUNCTIONS:
        graph.add_conditional_edges(name, route_next_node, edges)

    app = graph.compile()
    logger.info(f"Turn graph compiled | nodes={list(NODE_FUNCTIONS)}")
    return app
