"""Async HTTP client for the postal-code / city / region location index.

The index is a collaborator service exposing ``/locations/*`` endpoints that
answer with ``{"results": [...]}``.  Rows arrive in two naming generations
(``city``/``region``/``countryCode`` and the older ``name``/``admin_name1``/
``country``); both are accepted.  Rows with unusable coordinates are skipped
individually, a failing request yields a tagged ``Err``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from location_api.lib.geocoder.base import Err, FailureReason, GeographicCoordinates, Ok, Outcome, UpstreamError

DEFAULT_TIMEOUT = 5.0
POSTAL_LOOKUP_LIMIT = 8
CITY_LOOKUP_LIMIT = 8
REGION_LOOKUP_LIMIT = 50


@dataclass(frozen=True)
class IndexRow:
    """One normalized row from the location index."""

    name: str
    city: str
    coordinates: GeographicCoordinates
    country_code: str
    postal_code: str | None = None
    region: str | None = None
    district: str | None = None
    confidence: float | None = None
    relevance_score: float | None = None
    id: str | None = None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _score(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coordinates(item: Mapping[str, Any]) -> GeographicCoordinates:
    coords = item.get("coordinates")
    if isinstance(coords, Mapping):
        return GeographicCoordinates.parse(coords.get("lat"), coords.get("lng", coords.get("lon")))
    return GeographicCoordinates.parse(item.get("lat", item.get("latitude")), item.get("lng", item.get("longitude")))


def parse_row(item: Any) -> IndexRow | None:
    """Normalize a raw index row, or return None when it is unusable."""
    if not isinstance(item, Mapping):
        return None
    try:
        coordinates = _coordinates(item)
    except ValueError as e:
        logger.debug("Skipping index row with unusable coordinates: {}", e)
        return None

    name = _text(item.get("name"))
    city = _text(item.get("city")) or name
    if city is None:
        logger.debug("Skipping index row without a place name")
        return None

    return IndexRow(
        name=name or city,
        city=city,
        coordinates=coordinates,
        country_code=(_text(item.get("countryCode")) or _text(item.get("country")) or "").upper(),
        postal_code=_text(item.get("postalCode")),
        region=_text(item.get("region")) or _text(item.get("admin_name1")),
        district=_text(item.get("district")) or _text(item.get("admin_name2")),
        confidence=_score(item.get("confidence")),
        relevance_score=_score(item.get("relevanceScore")),
        id=_text(item.get("id")),
    )


class LocationIndexClient:
    """Client for the collaborator-hosted location index.

    Args:
        base_url: API root, e.g. ``https://example.org/api``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _get_json(self, path: str, params: Mapping[str, str | int | float]) -> Any:
        """GET ``path`` and decode the JSON body.

        Raises:
            UpstreamError: On timeout, connection failure, non-2xx status or invalid JSON.
        """
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise UpstreamError("location-index", f"{path} timed out") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                "location-index",
                f"{path} returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError("location-index", f"{path} connection failed: {e}") from e
        except ValueError as e:
            raise UpstreamError("location-index", f"{path} returned invalid JSON") from e

    async def _rows(self, path: str, params: Mapping[str, str | int | float]) -> Outcome[list[IndexRow]]:
        try:
            data = await self._get_json(path, params)
        except UpstreamError as e:
            logger.warning("Location index unavailable: {}", e.message)
            return Err(FailureReason.UPSTREAM_UNAVAILABLE, e.message, status_code=e.status_code)
        except Exception as e:
            logger.exception("Location index unexpected error on {}", path)
            return Err(FailureReason.UPSTREAM_UNAVAILABLE, f"Unexpected error: {e}")

        raw = data.get("results") if isinstance(data, Mapping) else None
        if raw is None:
            return Err(FailureReason.MALFORMED_DATA, f"{path} response has no results array")
        if not isinstance(raw, list):
            return Err(FailureReason.MALFORMED_DATA, f"{path} results is not a list")

        rows = [row for row in (parse_row(item) for item in raw) if row is not None]
        if len(rows) < len(raw):
            logger.debug("Dropped {} malformed row(s) from {}", len(raw) - len(rows), path)
        if not rows:
            return Err(FailureReason.NOT_FOUND)
        return Ok(rows)

    async def nearby(
        self,
        center: GeographicCoordinates,
        radius_km: float,
        country: str,
        limit: int,
    ) -> Outcome[list[IndexRow]]:
        """Rows of one country within ``radius_km`` of ``center``."""
        return await self._rows(
            "/locations/nearby",
            {"lat": center.lat, "lng": center.lng, "radius": radius_km, "country": country, "limit": limit},
        )

    async def postal_lookup(
        self, postal_code: str, country: str, limit: int = POSTAL_LOOKUP_LIMIT
    ) -> Outcome[list[IndexRow]]:
        """Rows whose postal code matches ``postal_code``."""
        return await self._rows(
            "/locations/postal-lookup",
            {"postal_code": postal_code, "country": country, "limit": limit},
        )

    async def city_lookup(self, city: str, country: str, limit: int = CITY_LOOKUP_LIMIT) -> Outcome[list[IndexRow]]:
        """One row per postal code of the cities matching ``city``."""
        return await self._rows("/locations/city-lookup", {"city": city, "country": country, "limit": limit})

    async def region_lookup(
        self, region: str, country: str, limit: int = REGION_LOOKUP_LIMIT
    ) -> Outcome[list[IndexRow]]:
        """One row per city/postal-code pair in regions matching ``region``."""
        return await self._rows("/locations/region-lookup", {"region": region, "country": country, "limit": limit})
