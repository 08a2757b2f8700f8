"""
Receipts contract.

Defines the record of facts and decisions behind the last reply of a
thread, used by the /why introspection command.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class Fact(BaseModel):
    """A single fact used to build a reply."""

    source: str = Field(description="Where the fact came from (e.g., 'Open-Meteo')")
    key: str = Field(description="Fact identifier (e.g., 'weather_summary')")
    value: str = Field(description="Human-readable fact value")
    url: Optional[str] = Field(default=None, description="Source URL if any")


class Receipts(BaseModel):
    """Facts, decisions and reply recorded for the last turn of a thread."""

    facts: List[Fact] = Field(default_factory=list)
    decisions: List[str] = Field(default_factory=list)
    reply: Optional[str] = Field(default=None, description="Reply the receipts explain")

    @property
    def sources(self) -> List[str]:
        """Distinct fact sources, in first-seen order."""
        seen: List[str] = []
        for fact in self.facts:
            if fact.source not in seen:
                seen.append(fact.source)
        return seen

    def format(self) -> str:
        """Render the receipts as the text shown for /why."""
        if not self.facts and not self.decisions:
            return "I don't have any details about a previous answer in this conversation yet."

        lines = ["Here's how I got my last answer:", ""]
        if self.sources:
            lines.append(f"Sources: {', '.join(self.sources)}")
        if self.facts:
            lines.append("Facts used:")
            for fact in self.facts:
                suffix = f" ({fact.url})" if fact.url else ""
                lines.append(f"- [{fact.source}] {fact.key}: {fact.value}{suffix}")
        if self.decisions:
            lines.append("Decisions:")
            for decision in self.decisions:
                lines.append(f"- {decision}")
        return "\n".join(lines)
