"""
Attractions via the OpenTripMap API.

Resolves the city with the geoname endpoint, then lists popular places
within a radius. The kid-friendly profile narrows the place kinds.
"""

import logging
import os
from typing import List, Literal, Optional

import requests
from pydantic import BaseModel, Field

from voyant.tools.http import ToolHTTPError, TransientHTTPError, get_json


logger = logging.getLogger(__name__)

BASE_URL = "https://api.opentripmap.com/0.1/en/places"
SOURCE_NAME = "OpenTripMap"
SEARCH_RADIUS_M = 10000

Profile = Literal["default", "kid_friendly"]

PROFILE_KINDS = {
    "default": "interesting_places",
    "kid_friendly": "amusements,gardens_and_parks,museums,natural",
}

_REQUEST_ERRORS = (ToolHTTPError, TransientHTTPError, requests.RequestException)


class Attraction(BaseModel):
    name: str
    kinds: str = ""
    rate: Optional[float] = None


class AttractionsResult(BaseModel):
    ok: bool
    attractions: List[Attraction] = Field(default_factory=list)
    source: Optional[str] = None
    reason: Optional[str] = None

    @property
    def summary(self) -> str:
        lines = []
        for a in self.attractions:
            kind = a.kinds.split(",")[0].replace("_", " ") if a.kinds else ""
            lines.append(f"- {a.name} ({kind})" if kind else f"- {a.name}")
        return "\n".join(lines)


def get_attractions(city: str, limit: int = 7, profile: Profile = "default") -> AttractionsResult:
    """
    List attractions for a city.

    Returns ok=False with a reason (no_api_key, unknown_city, no_results,
    unavailable) instead of raising.
    """
    api_key = os.environ.get("OPENTRIPMAP_API_KEY")
    if not api_key:
        logger.info("Attractions lookup skipped: OPENTRIPMAP_API_KEY is not set")
        return AttractionsResult(ok=False, reason="no_api_key")

    try:
        geo = get_json(f"{BASE_URL}/geoname", params={"name": city, "apikey": api_key})
        if not geo or geo.get("status") == "NOT_FOUND" or "lat" not in geo:
            return AttractionsResult(ok=False, reason="unknown_city")

        places = get_json(
            f"{BASE_URL}/radius",
            params={
                "radius": SEARCH_RADIUS_M,
                "lon": geo["lon"],
                "lat": geo["lat"],
                "kinds": PROFILE_KINDS[profile],
                "rate": 2,
                "format": "json",
                # Over-fetch: many entries come back without a name
                "limit": limit * 3,
                "apikey": api_key,
            },
        )
    except _REQUEST_ERRORS as e:
        logger.warning(f"OpenTripMap lookup failed for {city!r}: {e}")
        return AttractionsResult(ok=False, reason="unavailable")

    seen = set()
    attractions = []
    for place in places or []:
        name = (place.get("name") or "").strip()
        if not name or name in seen:
            continue
        seen.add(name)
        attractions.append(Attraction(name=name, kinds=place.get("kinds") or "", rate=place.get("rate")))
        if len(attractions) >= limit:
            break

    if not attractions:
        return AttractionsResult(ok=False, reason="no_results")

    logger.info(f"OpenTripMap returned {len(attractions)} attractions for {city!r} ({profile})")
    return AttractionsResult(ok=True, attractions=attractions, source=SOURCE_NAME)
