"""OpenStreetMap Nominatim geocoder adapter.

Uses the Nominatim search API (https://nominatim.org/release-docs/develop/api/Search/)
to resolve places the local store does not know.  Free but rate-limited to
1 req/sec on the public instance.
"""

from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from location_api.lib.geocoder.base import (
    BaseGeocoder,
    Err,
    FailureReason,
    GeocodeSource,
    GeocodingResult,
    GeographicCoordinates,
    LocationHierarchy,
    LocationType,
    Ok,
    Outcome,
    UpstreamError,
)
from location_api.lib.geocoder.scoring import EXTERNAL_CONFIDENCE_FLOOR, EXTERNAL_CONFIDENCE_RULES, first_match

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "location-api/1.0"

# Address keys checked in priority order to infer what kind of place matched
_LOCATION_TYPE_KEYS: tuple[tuple[tuple[str, ...], LocationType], ...] = (
    (("city",), LocationType.CITY),
    (("town",), LocationType.TOWN),
    (("village",), LocationType.VILLAGE),
    (("suburb", "neighbourhood"), LocationType.SUBURB),
    (("county", "district"), LocationType.DISTRICT),
    (("state", "region"), LocationType.REGION),
    (("country",), LocationType.COUNTRY),
)


def _first(address: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = address.get(key)
        if value:
            return str(value)
    return None


def determine_location_type(address: Mapping[str, Any]) -> LocationType:
    """Infer the location type from which address fields are present (defaults to city)."""
    for keys, location_type in _LOCATION_TYPE_KEYS:
        if _first(address, *keys):
            return location_type
    return LocationType.CITY


def calculate_confidence(item: Mapping[str, Any], query: str) -> float:
    """Score how well a Nominatim hit matches the query.

    0.9 when the display name contains the query, 0.8 when an address component
    equals it, 0.7 when a component contains it, 0.6 otherwise.
    """
    display = str(item.get("display_name") or "").lower()
    address = item.get("address")
    if not isinstance(address, Mapping):
        address = {}
    score = first_match(EXTERNAL_CONFIDENCE_RULES, display, address, query.strip().lower())
    return EXTERNAL_CONFIDENCE_FLOOR if score is None else score


def _parse_population(extratags: Mapping[str, Any] | None) -> int | None:
    if not extratags:
        return None
    raw = extratags.get("population")
    if raw is None:
        return None
    try:
        return int(str(raw).replace(",", "").strip())
    except ValueError:
        return None


class NominatimGeocoder(BaseGeocoder):
    """Nominatim-compatible free-text geocoder.

    Args:
        base_url: API root; ``/search`` is appended.
        timeout: Request timeout in seconds.
        email: Optional contact email sent with every request.
        user_agent: User-Agent header value.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = NOMINATIM_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        email: str = "",
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._email = email
        self._user_agent = user_agent
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "nominatim"

    @property
    def rate_limit_delay(self) -> float:
        return 1.0

    def _build_params(self, query: str, country_code: str | None) -> dict[str, str | int]:
        params: dict[str, str | int] = {
            "q": query,
            "format": "json",
            "limit": 1,
            "addressdetails": 1,
            "extratags": 1,
        }
        if country_code:
            params["countrycodes"] = country_code.lower()
        if self._email:
            params["email"] = self._email
        return params

    async def _fetch(self, params: Mapping[str, str | int]) -> Any:
        """Perform the HTTP request and decode JSON.

        Raises:
            UpstreamError: On timeout, connection failure, non-2xx status or invalid JSON.
        """
        headers = {"User-Agent": self._user_agent}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(f"{self._base_url}/search", params=params, headers=headers)
                response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise UpstreamError("nominatim", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                "nominatim",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError("nominatim", f"Connection to geocoding provider failed: {e}") from e
        except ValueError as e:
            raise UpstreamError("nominatim", "Provider returned invalid JSON") from e

    async def lookup(self, query: str, country_code: str | None = None) -> Outcome[GeocodingResult]:
        """Geocode free text using the Nominatim API.

        Args:
            query: Free-text place name.
            country_code: Optional ISO alpha-2 filter (``countrycodes``).

        Returns:
            ``Ok(GeocodingResult)``, or ``Err`` tagged not_found,
            upstream_unavailable or malformed_data.  Never raises.
        """
        if not query or not query.strip():
            return Err(FailureReason.INVALID_INPUT, "empty query")

        try:
            data = await self._fetch(self._build_params(query.strip(), country_code))
        except UpstreamError as e:
            logger.warning("Nominatim unavailable: {}", e.message)
            return Err(FailureReason.UPSTREAM_UNAVAILABLE, e.message, status_code=e.status_code)
        except Exception as e:
            logger.exception("Nominatim geocoder unexpected error")
            return Err(FailureReason.UPSTREAM_UNAVAILABLE, f"Unexpected error: {e}")

        return self._parse_response(data, query)

    def _parse_response(self, data: Any, query: str) -> Outcome[GeocodingResult]:
        """Parse a Nominatim search response into a tagged result.

        Args:
            data: Decoded JSON (a list of hits).
            query: The original query, used for confidence scoring.
        """
        if not isinstance(data, list) or not data:
            return Err(FailureReason.NOT_FOUND)

        best = data[0]
        if not isinstance(best, Mapping):
            return Err(FailureReason.MALFORMED_DATA, "result is not an object")

        try:
            coordinates = GeographicCoordinates.parse(best.get("lat"), best.get("lon"))
        except ValueError as e:
            logger.debug("Discarding Nominatim hit with unusable coordinates: {}", e)
            return Err(FailureReason.MALFORMED_DATA, str(e))

        address = best.get("address") or {}
        if not isinstance(address, Mapping):
            address = {}
        hierarchy = self._build_hierarchy(best, address, coordinates)

        return Ok(
            GeocodingResult(
                coordinates=coordinates,
                hierarchy=hierarchy,
                source=GeocodeSource.EXTERNAL,
                confidence=calculate_confidence(best, query),
            )
        )

    @staticmethod
    def _build_hierarchy(
        item: Mapping[str, Any],
        address: Mapping[str, Any],
        coordinates: GeographicCoordinates,
    ) -> LocationHierarchy:
        display_name = str(item.get("display_name") or "")
        city = _first(address, "city", "town", "village", "municipality") or display_name.split(",")[0].strip()
        country_code = _first(address, "country_code")
        extratags = item.get("extratags")
        return LocationHierarchy(
            country=_first(address, "country") or "Unknown",
            country_code=country_code.upper() if country_code else "XX",
            region=_first(address, "state", "region", "province") or "",
            district=_first(address, "county", "district"),
            city=city,
            suburb=_first(address, "suburb", "neighbourhood"),
            village=_first(address, "village"),
            postal_code=_first(address, "postcode"),
            coordinates=coordinates,
            location_type=determine_location_type(address),
            population=_parse_population(extratags if isinstance(extratags, Mapping) else None),
        )
