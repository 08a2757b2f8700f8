"""
Turn graph.

Handles one user message per invocation:
    preflight -> consent -> conflicts -> route -> handler [-> web_search]

Slots, consent flags and receipts persist between turns in the slot
store, keyed by thread id.
"""

from voyant.graph.build import create_turn_graph
from voyant.graph.turn import ChatResult, handle_chat, run_turn

__all__ = ["create_turn_graph", "ChatResult", "handle_chat", "run_turn"]
