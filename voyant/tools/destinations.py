"""
Destination recommendations from a bundled catalog.

Catalog entries are filtered by travel month and scored against the
traveler profile, budget and preferred climate. The top picks are
enriched with country facts from REST Countries.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel

from voyant.nlp.parsers import normalize_month
from voyant.tools import countries


logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "destinations_catalog.json"

TOP_N = 4
POPULAR = {"Paris", "London", "Rome", "Barcelona", "Amsterdam"}
_FAMILY_WORDS = ("family", "kid", "child", "toddler")


class CatalogItem(BaseModel):
    city: str
    country: str
    months: List[str]
    climate: str
    budget: str
    family: bool


class DestinationFact(BaseModel):
    """One recommended destination plus where its facts came from."""

    source: str
    city: str
    country: str
    climate: str
    budget: str
    family_friendly: bool
    months: List[str]
    country_summary: Optional[str] = None
    url: Optional[str] = None

    def describe(self) -> str:
        extras = ", family-friendly" if self.family_friendly else ""
        return f"{self.city}, {self.country} ({self.climate} climate, {self.budget} budget{extras})"


@lru_cache(maxsize=1)
def load_catalog(path: str = str(CATALOG_PATH)) -> List[CatalogItem]:
    """Load and validate the catalog (cached)."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return [CatalogItem.model_validate(item) for item in raw]


def _month_abbr(slots: Dict[str, str]) -> Optional[str]:
    month = normalize_month(slots.get("month")) or normalize_month(slots.get("dates"))
    return month[:3] if month else None


def _is_family(slots: Dict[str, str]) -> bool:
    profile = (slots.get("travelerProfile") or "").lower()
    return any(word in profile for word in _FAMILY_WORDS)


def score_destination(item: CatalogItem, slots: Dict[str, str]) -> float:
    score = 0.0
    if _is_family(slots) and item.family:
        score += 2
    if slots.get("budget") and item.budget == slots["budget"].lower():
        score += 1
    if slots.get("climate") and item.climate == slots["climate"].lower():
        score += 1
    if item.city in POPULAR:
        score += 0.5
    return score


def recommend_destinations(slots: Dict[str, str], limit: int = TOP_N) -> List[DestinationFact]:
    """
    Recommend destinations for the given slots.

    Args:
        slots: Thread slots (month/dates, travelerProfile, budget, climate)
        limit: Number of destinations to return

    Returns:
        Up to ``limit`` DestinationFact entries, best first. A failed country
        lookup keeps the destination with catalog facts only.
    """
    catalog = load_catalog()
    month = _month_abbr(slots)
    candidates = [c for c in catalog if not month or month in c.months]
    ranked = sorted(candidates, key=lambda c: score_destination(c, slots), reverse=True)[:limit]
    logger.info(
        f"Destination recommender | month={month}, family={_is_family(slots)}, "
        f"candidates={len(candidates)}, picked={[c.city for c in ranked]}"
    )

    facts = []
    for item in ranked:
        info = countries.get_country_facts(item.country)
        facts.append(
            DestinationFact(
                source="Catalog+REST Countries" if info.ok else "Catalog",
                city=item.city,
                country=item.country,
                climate=item.climate,
                budget=item.budget,
                family_friendly=item.family,
                months=item.months,
                country_summary=info.summary if info.ok else None,
                url=info.url if info.ok else None,
            )
        )
    return facts
