"""
Voyant: a conversational travel assistant.

This package contains:
- shared/: Common infrastructure (config, LLM client, logging, contracts)
- memory/: Per-thread slot memory and receipts
- nlp/: Parsers, content classifier, router, consent and clarifier helpers
- tools/: Weather, destinations, attractions, policy and web search wrappers
- graph/: The turn graph and the chat API
"""

from voyant.graph.build import create_turn_graph
from voyant.graph.turn import handle_chat

__all__ = ["create_turn_graph", "handle_chat"]
