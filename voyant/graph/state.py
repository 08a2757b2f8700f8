"""
Turn state schema.

Defines the state that flows through the turn graph for a single user
message: the message, the thread's slots, routing results, and the reply
with its receipts.
"""

from typing import Annotated, Dict, List, Optional, TypedDict
import operator


class TurnState(TypedDict, total=False):
    """
    State schema for one turn.

    Nodes set ``next_node`` to hand off; a node that produces ``reply``
    sets it to "done". Facts and decisions accumulate across nodes and
    become the thread's receipts.
    """

    # Input
    thread_id: str
    message: str

    # Working data
    slots: Dict[str, str]
    intent: Optional[str]
    missing: List[str]
    content_type: Optional[str]
    disclaimers: str
    short_timeframe: bool
    search_query: Optional[str]
    skip_deep_research: bool
    pending_deep_research_query: Optional[str]

    # Routing
    next_node: str

    # Output
    reply: Optional[str]
    citations: List[str]
    facts: Annotated[List[dict], operator.add]
    decisions: Annotated[List[str], operator.add]

    # Tracking
    errors: Annotated[List[str], operator.add]
    messages: Annotated[List[dict], operator.add]
