"""Postal lookup service — postal code ↔ city ↔ region resolution against the location index.

All lookups are cached per ``(query, country)`` for ten minutes.  Upstream
failures are logged and answered with an empty list; they are not cached.
"""

import asyncio
import math
import re
from collections.abc import Iterable

from loguru import logger

from location_api.lib.geocoder import CacheStats, Err, FailureReason, TTLCache, country_name
from location_api.lib.geocoder.countries import HOME_MARKETS
from location_api.lib.location_index import IndexRow, LocationIndexClient
from location_api.schemas.location import (
    CityLookupResult,
    Coordinates,
    PostalCodeLookupResult,
    RegionLookupResult,
    SmartLookupResult,
)

DEFAULT_COUNTRY = "DE"
DEFAULT_LOOKUP_TTL = 10 * 60.0
MIN_QUERY_LENGTH = 2

POSTAL_CONFIDENCE = 0.9
CITY_CONFIDENCE = 0.8
REGION_CONFIDENCE = 0.9

# Per-country postal code formats; countries not listed are accepted as-is
POSTAL_CODE_PATTERNS: dict[str, re.Pattern[str]] = {
    "DE": re.compile(r"^[0-9]{5}$"),
    "IT": re.compile(r"^[0-9]{5}$"),
    "ES": re.compile(r"^[0-9]{5}$"),
    "FR": re.compile(r"^[0-9]{5}$"),
    "AT": re.compile(r"^[0-9]{4}$"),
    "CH": re.compile(r"^[0-9]{4}$"),
    "BE": re.compile(r"^[0-9]{4}$"),
    "NL": re.compile(r"^[0-9]{4}\s?[A-Z]{2}$", re.IGNORECASE),
    "US": re.compile(r"^[0-9]{5}(-[0-9]{4})?$"),
    "GB": re.compile(r"^[A-Z]{1,2}[0-9R][0-9A-Z]?\s?[0-9][A-Z]{2}$", re.IGNORECASE),
}

_POSTAL_CODE_LIKE = re.compile(r"^[0-9A-Z\- ]{3,10}$", re.IGNORECASE)

LookupCacheKey = tuple[str, str, str]


def validate_postal_code(postal_code: str, country: str) -> bool:
    """Check a postal code against its country's format.

    Unknown countries are accepted so unsupported markets are never blocked.
    """
    pattern = POSTAL_CODE_PATTERNS.get(country.strip().upper())
    if pattern is None:
        return True
    return bool(pattern.fullmatch(postal_code.strip()))


def format_postal_code(postal_code: str, country: str) -> str:
    """Normalize a postal code to its country's conventional spelling."""
    cleaned = re.sub(r"\s+", "", postal_code).upper()
    country = country.strip().upper()
    if country == "NL" and len(cleaned) == 6:
        return f"{cleaned[:4]} {cleaned[4:]}"
    if country == "GB" and len(cleaned) >= 5:
        return f"{cleaned[:-3]} {cleaned[-3:]}"
    if country == "US" and len(cleaned) == 9 and cleaned.isdigit():
        return f"{cleaned[:5]}-{cleaned[5:]}"
    return cleaned


def looks_like_postal_code(text: str) -> bool:
    """Whether free text is shaped like a postal code rather than a place name.

    Every supported format contains a digit, so purely alphabetic input is a name.
    """
    text = text.strip()
    return bool(_POSTAL_CODE_LIKE.fullmatch(text)) and any(ch.isdigit() for ch in text)


def format_display_name(city: str, region: str | None, postal_code: str | None, country_code: str) -> str:
    """Format ``postal code, city[, region][, country]``.

    The region is skipped when it repeats the city and the country is skipped
    for the home markets (DE, IT, ES, FR).
    """
    parts = [postal_code] if postal_code else []
    parts.append(city)
    if region and region != city:
        parts.append(region)
    if country_code and country_code.upper() not in HOME_MARKETS:
        parts.append(country_name(country_code))
    return ", ".join(parts)


def summarize_postal_codes(postal_codes: Iterable[str]) -> list[str]:
    """Compress a region's postal codes for display.

    Up to three codes are listed in full, more than ten are cut to the first
    five plus a ``+N more`` marker, anything in between is the sorted list.
    """
    codes = sorted(set(postal_codes))
    if len(codes) <= 3:
        return codes
    if len(codes) > 10:
        return [*codes[:5], f"+{len(codes) - 5} more"]
    return codes


def _confidence(row: IndexRow, default: float) -> float:
    value = row.confidence if row.confidence is not None else row.relevance_score
    if value is None or math.isnan(value):
        return default
    return min(max(value, 0.0), 1.0)


def _postal_codes(rows: Iterable[IndexRow]) -> list[str]:
    return sorted({row.postal_code for row in rows if row.postal_code})


class PostalLookupService:
    """Bidirectional postal code / city / region lookup with caching.

    Args:
        index: Client for the location index.
        cache: Cache for postal and city lookups (created when omitted).
        region_cache: Separate cache for region lookups (created when omitted).
        default_country: Country used when a call names none.
    """

    def __init__(
        self,
        index: LocationIndexClient,
        cache: TTLCache[LookupCacheKey, list] | None = None,
        region_cache: TTLCache[LookupCacheKey, list[RegionLookupResult]] | None = None,
        default_country: str = DEFAULT_COUNTRY,
    ) -> None:
        self._index = index
        self._cache: TTLCache[LookupCacheKey, list] = (
            TTLCache(DEFAULT_LOOKUP_TTL, name="lookup") if cache is None else cache
        )
        self._region_cache: TTLCache[LookupCacheKey, list[RegionLookupResult]] = (
            TTLCache(DEFAULT_LOOKUP_TTL, name="region") if region_cache is None else region_cache
        )
        self._default_country = default_country.upper()

    @property
    def caches(self) -> list[TTLCache]:
        return [self._cache, self._region_cache]

    def _country(self, country: str | None) -> str:
        return (country or self._default_country).strip().upper()

    async def lookup_by_postal_code(self, postal_code: str, country: str | None = None) -> list[PostalCodeLookupResult]:
        """Find the cities a postal code belongs to."""
        code = postal_code.strip()
        country = self._country(country)
        if len(code) < MIN_QUERY_LENGTH:
            return []

        key: LookupCacheKey = ("postal", code.upper(), country)
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        outcome = await self._index.postal_lookup(code, country)
        if isinstance(outcome, Err):
            if outcome.reason is FailureReason.NOT_FOUND:
                self._cache.set(key, [])
            return []

        results = [
            PostalCodeLookupResult(
                postal_code=row.postal_code or code,
                city=row.city,
                region=row.region or "",
                district=row.district,
                country=country_name(row.country_code or country),
                country_code=row.country_code or country,
                coordinates=Coordinates.from_point(row.coordinates),
                confidence=_confidence(row, POSTAL_CONFIDENCE),
                display_name=format_display_name(
                    row.city, row.region, row.postal_code or code, row.country_code or country
                ),
            )
            for row in outcome.value
        ]
        self._cache.set(key, results)
        return list(results)

    async def lookup_by_city(self, city: str, country: str | None = None) -> list[CityLookupResult]:
        """Find a city's postal codes, one result per ``(city, region)`` group."""
        name = city.strip()
        country = self._country(country)
        if len(name) < MIN_QUERY_LENGTH:
            return []

        key: LookupCacheKey = ("city", name.lower(), country)
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        outcome = await self._index.city_lookup(name, country)
        if isinstance(outcome, Err):
            if outcome.reason is FailureReason.NOT_FOUND:
                self._cache.set(key, [])
            return []

        groups: dict[tuple[str, str], list[IndexRow]] = {}
        for row in outcome.value:
            groups.setdefault((row.city, row.region or ""), []).append(row)

        results: list[CityLookupResult] = []
        for (city_name, region), rows in groups.items():
            first = rows[0]
            postal_codes = _postal_codes(rows)
            country_code = first.country_code or country
            results.append(
                CityLookupResult(
                    city=city_name,
                    postal_codes=postal_codes,
                    region=region,
                    district=first.district,
                    country=country_name(country_code),
                    country_code=country_code,
                    coordinates=Coordinates.from_point(first.coordinates),
                    confidence=_confidence(first, CITY_CONFIDENCE),
                    display_name=format_display_name(
                        city_name, region, postal_codes[0] if postal_codes else None, country_code
                    ),
                )
            )

        self._cache.set(key, results)
        return list(results)

    async def _region_rows(self, region: str, country: str) -> list[IndexRow] | None:
        """Rows for a region; None means the upstream failed."""
        outcome = await self._index.region_lookup(region, country)
        if not isinstance(outcome, Err):
            return outcome.value
        if outcome.reason is not FailureReason.NOT_FOUND:
            return None

        # Sparse region index: fall back to the city index filtered on the region field.
        # TODO: drop this fallback once the region index is confirmed complete.
        logger.debug("No direct region rows, falling back to city lookup")
        fallback = await self._index.city_lookup(region, country, limit=50)
        if isinstance(fallback, Err):
            return [] if fallback.reason is FailureReason.NOT_FOUND else None
        needle = region.lower()
        return [row for row in fallback.value if row.region and needle in row.region.lower()]

    async def lookup_by_region(self, region: str, country: str | None = None) -> list[RegionLookupResult]:
        """Summarize a region: its cities, postal code ranges and centroid."""
        name = region.strip()
        country = self._country(country)
        if len(name) < MIN_QUERY_LENGTH:
            return []

        key: LookupCacheKey = ("region", name.lower(), country)
        cached = self._region_cache.get(key)
        if cached is not None:
            return list(cached)

        rows = await self._region_rows(name, country)
        if rows is None:
            return []

        groups: dict[str, list[IndexRow]] = {}
        for row in rows:
            groups.setdefault(row.region or "Unknown", []).append(row)

        results: list[RegionLookupResult] = []
        for region_name, members in groups.items():
            first = members[0]
            country_code = first.country_code or country
            results.append(
                RegionLookupResult(
                    region=region_name,
                    cities=sorted({row.city for row in members}),
                    postal_code_ranges=summarize_postal_codes(_postal_codes(members)),
                    country=country_name(country_code),
                    country_code=country_code,
                    coordinates=Coordinates(
                        lat=sum(row.coordinates.lat for row in members) / len(members),
                        lng=sum(row.coordinates.lng for row in members) / len(members),
                    ),
                    confidence=REGION_CONFIDENCE,
                )
            )

        self._region_cache.set(key, results)
        return list(results)

    async def smart_lookup(self, text: str, country: str | None = None) -> SmartLookupResult:
        """Run postal-code and city lookups together for ambiguous input."""
        postal_results, city_results = await asyncio.gather(
            self.lookup_by_postal_code(text, country),
            self.lookup_by_city(text, country),
        )
        return SmartLookupResult(
            looks_like_postal_code=looks_like_postal_code(text),
            postal_results=postal_results,
            city_results=city_results,
        )

    def clear_cache(self) -> None:
        self._cache.clear()
        self._region_cache.clear()

    def cache_stats(self) -> list[CacheStats]:
        return [cache.stats() for cache in self.caches]
