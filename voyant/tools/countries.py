"""Country facts from the REST Countries API."""

import logging
from typing import Optional

import requests
from pydantic import BaseModel

from voyant.tools.http import ToolHTTPError, TransientHTTPError, get_json


logger = logging.getLogger(__name__)

COUNTRY_URL = "https://restcountries.com/v3.1/name/{name}"
SOURCE_NAME = "REST Countries"


class CountryFacts(BaseModel):
    ok: bool
    name: Optional[str] = None
    capital: Optional[str] = None
    region: Optional[str] = None
    currencies: Optional[str] = None
    languages: Optional[str] = None
    url: Optional[str] = None
    reason: Optional[str] = None

    @property
    def summary(self) -> str:
        parts = [p for p in (
            f"capital {self.capital}" if self.capital else None,
            f"currency {self.currencies}" if self.currencies else None,
            f"languages {self.languages}" if self.languages else None,
        ) if p]
        return f"{self.name}: " + ", ".join(parts) if parts else (self.name or "")


def get_country_facts(country: str) -> CountryFacts:
    """Capital, currency and languages for a country name."""
    url = COUNTRY_URL.format(name=requests.utils.quote(country))
    try:
        data = get_json(url, params={"fields": "name,capital,region,currencies,languages"})
    except ToolHTTPError as e:
        reason = "not_found" if e.status_code == 404 else "http_error"
        logger.info(f"REST Countries lookup failed for {country!r}: {e}")
        return CountryFacts(ok=False, reason=reason)
    except (TransientHTTPError, requests.RequestException) as e:
        logger.warning(f"REST Countries unavailable for {country!r}: {e}")
        return CountryFacts(ok=False, reason="unavailable")

    if not isinstance(data, list) or not data:
        return CountryFacts(ok=False, reason="not_found")

    entry = data[0]
    currencies = entry.get("currencies") or {}
    languages = entry.get("languages") or {}
    return CountryFacts(
        ok=True,
        name=(entry.get("name") or {}).get("common", country),
        capital=", ".join(entry.get("capital") or []) or None,
        region=entry.get("region"),
        currencies=", ".join(
            f"{c.get('name', code)} ({code})" for code, c in currencies.items()
        ) or None,
        languages=", ".join(languages.values()) or None,
        url=url,
    )
