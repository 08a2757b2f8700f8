"""Turn graph nodes."""

from voyant.graph.nodes.preflight import preflight_node
from voyant.graph.nodes.consent import consent_node
from voyant.graph.nodes.conflicts import conflicts_node
from voyant.graph.nodes.route import route_node
from voyant.graph.nodes.weather import weather_node, packing_node
from voyant.graph.nodes.destinations import destinations_node, attractions_node
from voyant.graph.nodes.policy import policy_node
from voyant.graph.nodes.search import web_search_node, deep_research_node
from voyant.graph.nodes.fallback import system_node, unknown_node

__all__ = [
    "preflight_node",
    "consent_node",
    "conflicts_node",
    "route_node",
    "weather_node",
    "packing_node",
    "destinations_node",
    "attractions_node",
    "policy_node",
    "web_search_node",
    "deep_research_node",
    "system_node",
    "unknown_node",
]
