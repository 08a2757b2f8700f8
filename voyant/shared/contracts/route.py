"""
Routing contracts.

Defines the intent labels, the router's per-turn result, and the content
classification produced before routing.
"""

from typing import Dict, List, Literal
from pydantic import BaseModel, Field


Intent = Literal[
    "weather",
    "destinations",
    "packing",
    "attractions",
    "policy",
    "web_search",
    "system",
    "unknown",
]

INTENTS = (
    "weather",
    "destinations",
    "packing",
    "attractions",
    "policy",
    "web_search",
    "system",
    "unknown",
)

ContentType = Literal[
    "system",
    "travel",
    "unrelated",
    "budget",
    "restaurant",
    "flight",
    "refinement",
    "gibberish",
    "emoji_only",
]


class RouteResult(BaseModel):
    """
    Result of routing one message.

    Ephemeral: recomputed on every turn.
    """

    intent: Intent = Field(description="Classified intent")
    confidence: float = Field(ge=0, le=1, description="Router confidence")
    slots: Dict[str, str] = Field(
        default_factory=dict, description="Slots extracted from the message"
    )
    missing_slots: List[str] = Field(
        default_factory=list,
        description=(
            "Required slots the router sees as missing. The route node applies its "
            "own rules (origin city, packing context, day trips) and recomputes this."
        ),
    )
    need_external: bool = Field(
        default=False, description="Whether answering needs external data"
    )


class ContentClassification(BaseModel):
    """Coarse classification of a message before intent routing."""

    content_type: ContentType = Field(description="Kind of content")
    is_explicit_search: bool = Field(default=False)
    has_mixed_languages: bool = Field(default=False)
    needs_web_search: bool = Field(default=False)
    confidence: float = Field(default=0.6, ge=0, le=1)
