"""Contracts passed between the router, graph nodes and the chat API."""

from voyant.shared.contracts.receipts import Fact, Receipts
from voyant.shared.contracts.route import (
    ContentClassification,
    Intent,
    INTENTS,
    RouteResult,
)

__all__ = [
    "Fact",
    "Receipts",
    "ContentClassification",
    "Intent",
    "INTENTS",
    "RouteResult",
]
