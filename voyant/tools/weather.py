"""
Weather lookups via Open-Meteo (no API key required).

Current and near-term conditions come from the forecast API. A month
without concrete dates is answered from the archive API using the most
recent completed occurrence of that month as a climate proxy.
"""

import calendar
import logging
from datetime import date
from typing import List, Optional, Tuple

import requests
from pydantic import BaseModel

from voyant.tools.http import ToolHTTPError, TransientHTTPError, get_json
from voyant.tools import tavily_search


logger = logging.getLogger(__name__)

GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"

FORECAST_SOURCE = "open-meteo.com"
ARCHIVE_SOURCE = "archive-api.open-meteo.com"

FORECAST_DAYS = 3

# Seasons map to a representative Northern Hemisphere month
_MONTH_NUMBERS = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3,
    "april": 4, "apr": 4, "may": 5, "june": 6, "jun": 6, "july": 7, "jul": 7,
    "august": 8, "aug": 8, "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10, "november": 11, "nov": 11, "december": 12, "dec": 12,
    "winter": 1, "spring": 4, "summer": 7, "fall": 10, "autumn": 10,
}

_WMO_CONDITIONS = {
    0: "clear skies",
    1: "mainly clear skies",
    2: "partly cloudy skies",
    3: "overcast skies",
    45: "fog",
    48: "freezing fog",
    51: "light drizzle",
    53: "drizzle",
    55: "heavy drizzle",
    61: "light rain",
    63: "rain",
    65: "heavy rain",
    71: "light snow",
    73: "snow",
    75: "heavy snow",
    80: "rain showers",
    81: "rain showers",
    82: "violent rain showers",
    95: "thunderstorms",
    96: "thunderstorms with hail",
    99: "thunderstorms with hail",
}

_REQUEST_ERRORS = (ToolHTTPError, TransientHTTPError, requests.RequestException)


class GeoLocation(BaseModel):
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None


class WeatherResult(BaseModel):
    """Outcome of a weather lookup. ``reason`` explains failures."""

    ok: bool
    summary: str = ""
    source: Optional[str] = None
    max_c: Optional[float] = None
    min_c: Optional[float] = None
    query_type: Optional[str] = None
    reason: Optional[str] = None


def month_number(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    return _MONTH_NUMBERS.get(value.strip().lower())


def geocode(city: str) -> Optional[GeoLocation]:
    """
    Resolve a city name to coordinates.

    Returns None when the city is unknown. Request failures propagate so
    callers can tell an outage from a bad city name.
    """
    data = get_json(GEOCODE_URL, params={"name": city, "count": 1, "language": "en"})
    results = (data or {}).get("results") or []
    if not results:
        logger.info(f"Geocoding found no results for {city!r}")
        return None
    first = results[0]
    try:
        return GeoLocation(
            name=first["name"],
            latitude=first["latitude"],
            longitude=first["longitude"],
            country=first.get("country"),
        )
    except (KeyError, ValueError) as e:
        logger.warning(f"Unexpected geocoding payload for {city!r}: {e}")
        return None


def _avg(values: List[Optional[float]]) -> Optional[float]:
    clean = [v for v in values if v is not None]
    if not clean:
        return None
    return round(sum(clean) / len(clean), 1)


def _forecast(location: GeoLocation) -> Optional[WeatherResult]:
    data = get_json(
        FORECAST_URL,
        params={
            "latitude": location.latitude,
            "longitude": location.longitude,
            "current": "temperature_2m,weather_code",
            "daily": "temperature_2m_max,temperature_2m_min,precipitation_probability_max,weather_code",
            "forecast_days": FORECAST_DAYS,
            "timezone": "auto",
        },
    )
    daily = data.get("daily") or {}
    highs = daily.get("temperature_2m_max") or []
    lows = daily.get("temperature_2m_min") or []
    if not highs or not lows:
        return None

    max_c = max((v for v in highs if v is not None), default=None)
    min_c = min((v for v in lows if v is not None), default=None)
    if max_c is None or min_c is None:
        return None
    current = data.get("current") or {}
    condition = _WMO_CONDITIONS.get(current.get("weather_code"), "mixed conditions")
    rain = daily.get("precipitation_probability_max") or []

    parts = []
    if current.get("temperature_2m") is not None:
        parts.append(f"Currently {current['temperature_2m']:.0f}°C with {condition}.")
    parts.append(
        f"Over the next {len(highs)} days expect highs up to {max_c:.0f}°C "
        f"and lows around {min_c:.0f}°C"
    )
    rain_peak = max((v or 0 for v in rain), default=0)
    if rain_peak >= 50:
        parts[-1] += f", with up to a {rain_peak:.0f}% chance of rain."
    else:
        parts[-1] += "."

    return WeatherResult(
        ok=True,
        summary=" ".join(parts),
        source=FORECAST_SOURCE,
        max_c=max_c,
        min_c=min_c,
        query_type="forecast",
    )


def _climate_window(month: int, today: Optional[date] = None) -> Tuple[date, date]:
    """Most recent fully elapsed occurrence of ``month``."""
    today = today or date.today()
    year = today.year if month < today.month else today.year - 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _climate(location: GeoLocation, month: int) -> Optional[WeatherResult]:
    start, end = _climate_window(month)
    data = get_json(
        ARCHIVE_URL,
        params={
            "latitude": location.latitude,
            "longitude": location.longitude,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "daily": "temperature_2m_max,temperature_2m_min,precipitation_sum",
            "timezone": "auto",
        },
    )
    daily = data.get("daily") or {}
    max_c = _avg(daily.get("temperature_2m_max") or [])
    min_c = _avg(daily.get("temperature_2m_min") or [])
    if max_c is None or min_c is None:
        return None

    rainy_days = sum(1 for v in daily.get("precipitation_sum") or [] if v and v >= 1.0)
    month_name = calendar.month_name[month]
    summary = (
        f"In {month_name} {location.name} typically sees average highs of {max_c:.0f}°C "
        f"and lows of {min_c:.0f}°C, with rain on about {rainy_days} days "
        f"(based on {month_name} {start.year})."
    )
    return WeatherResult(
        ok=True,
        summary=summary,
        source=ARCHIVE_SOURCE,
        max_c=max_c,
        min_c=min_c,
        query_type="climate",
    )


def _search_fallback(city: str) -> WeatherResult:
    search = tavily_search.search_travel_info(f"weather in {city}", max_results=3)
    if search.ok and search.results:
        first = search.results[0]
        return WeatherResult(
            ok=True,
            summary=f"{first.title} - {first.description[:300]}",
            source=tavily_search.SOURCE_NAME,
            query_type="search_fallback",
        )
    return WeatherResult(ok=False, reason="unknown_city", source="geocoding-api.open-meteo.com")


def get_weather(
    city: str,
    month: Optional[str] = None,
    dates: Optional[str] = None,
) -> WeatherResult:
    """
    Look up weather for a city.

    A month without concrete dates is a climate query, unless it is the
    current month; everything else (including no time at all) gets the
    current forecast. An unknown city falls back to a web search before
    reporting ``unknown_city``; an unreachable service is
    ``weather_unavailable``.
    """
    try:
        location = geocode(city)
    except _REQUEST_ERRORS as e:
        logger.warning(f"Geocoding failed for {city!r}: {e}")
        return WeatherResult(ok=False, reason="weather_unavailable", source="geocoding-api.open-meteo.com")
    if location is None:
        logger.info(f"Weather: geocoding failed for {city!r}, trying search fallback")
        return _search_fallback(city)

    month_only = month and (not dates or dates.strip().lower() == month.strip().lower())
    month_num = month_number(month) if month_only else None
    if month_num == date.today().month:
        month_num = None
    query_type = "climate" if month_num else "forecast"
    logger.info(
        f"Weather lookup | city={location.name}, lat={location.latitude}, "
        f"lon={location.longitude}, type={query_type}"
    )

    try:
        result = _climate(location, month_num) if month_num else _forecast(location)
    except _REQUEST_ERRORS as e:
        logger.warning(f"Weather API failed for {city!r}: {e}")
        return WeatherResult(ok=False, reason="weather_unavailable", source=FORECAST_SOURCE)

    if result is None:
        return WeatherResult(ok=False, reason="weather_unavailable", source=FORECAST_SOURCE)
    return result
