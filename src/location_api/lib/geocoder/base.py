"""Core location types, tagged upstream results and the abstract geocoder interface."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class LocationType(StrEnum):
    """Kind of place a record or geocode describes."""

    COUNTRY = "country"
    REGION = "region"
    DISTRICT = "district"
    CITY = "city"
    TOWN = "town"
    VILLAGE = "village"
    SUBURB = "suburb"


class GeocodeSource(StrEnum):
    """Provenance of a geocoding result."""

    STATIC = "static"
    EXTERNAL = "external"


class FailureReason(StrEnum):
    """Why an upstream call produced no value."""

    NOT_FOUND = "not_found"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    MALFORMED_DATA = "malformed_data"
    INVALID_INPUT = "invalid_input"


def _check_score(name: str, value: float | None) -> None:
    if value is not None and not (0 <= value <= 1):
        msg = f"{name} must be between 0 and 1, got {value}"
        raise ValueError(msg)


@dataclass(frozen=True)
class GeographicCoordinates:
    """A WGS84 point."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            msg = f"coordinates must be finite, got ({self.lat}, {self.lng})"
            raise ValueError(msg)
        if not (-90 <= self.lat <= 90):
            msg = f"latitude must be between -90 and 90, got {self.lat}"
            raise ValueError(msg)
        if not (-180 <= self.lng <= 180):
            msg = f"longitude must be between -180 and 180, got {self.lng}"
            raise ValueError(msg)

    @classmethod
    def parse(cls, lat: object, lng: object) -> "GeographicCoordinates":
        """Build coordinates from loosely typed upstream values (strings, numbers).

        Raises:
            ValueError: If either value is missing, not numeric, not finite or out of range.
        """
        try:
            return cls(lat=float(lat), lng=float(lng))  # type: ignore[arg-type]
        except TypeError as e:
            msg = f"invalid coordinates: {lat!r}, {lng!r}"
            raise ValueError(msg) from e


@dataclass(frozen=True)
class LocationHierarchy:
    """Denormalized administrative context attached to a coordinate."""

    country: str
    country_code: str
    region: str
    city: str
    coordinates: GeographicCoordinates
    location_type: LocationType = LocationType.CITY
    district: str | None = None
    suburb: str | None = None
    village: str | None = None
    postal_code: str | None = None
    population: int | None = None


@dataclass(frozen=True)
class GeocodingResult:
    """A resolved place: coordinates, hierarchy, provenance and confidence."""

    coordinates: GeographicCoordinates
    hierarchy: LocationHierarchy
    source: GeocodeSource
    confidence: float

    def __post_init__(self) -> None:
        _check_score("confidence", self.confidence)


@dataclass(frozen=True)
class LocationSearchResult:
    """An autocomplete row produced by the static matcher."""

    name: str
    display_name: str
    coordinates: GeographicCoordinates
    hierarchy: LocationHierarchy
    relevance_score: float

    def __post_init__(self) -> None:
        _check_score("relevance_score", self.relevance_score)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful upstream outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed upstream outcome, tagged with the reason."""

    reason: FailureReason
    detail: str = ""
    status_code: int | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return False


Outcome = Ok[T] | Err


class UpstreamError(Exception):
    """Raised inside an HTTP adapter when the upstream service fails.

    Never crosses a public service boundary: adapters convert it to
    ``Err(FailureReason.UPSTREAM_UNAVAILABLE)``.

    Args:
        source: Name of the failing upstream (``nominatim``, ``location-index``).
        message: Human-readable error description.
        status_code: Optional HTTP status code returned by the upstream.
    """

    def __init__(self, source: str, message: str, status_code: int | None = None) -> None:
        self.source = source
        self.message = message
        self.status_code = status_code
        super().__init__(f"{source}: {message}")


class BaseGeocoder(ABC):
    """Abstract external geocoder. Implementations never raise from ``resolve``."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this geocoder provider."""

    @property
    def rate_limit_delay(self) -> float:
        """Minimum delay in seconds between requests (for rate-limited providers)."""
        return 0.0

    @abstractmethod
    async def lookup(self, query: str, country_code: str | None = None) -> Outcome[GeocodingResult]:
        """Resolve free text, reporting why resolution failed when it does.

        Args:
            query: Free-text place name.
            country_code: Optional ISO alpha-2 filter.

        Returns:
            ``Ok(GeocodingResult)`` or a tagged ``Err``.
        """

    async def resolve(self, query: str, country_code: str | None = None) -> GeocodingResult | None:
        """Resolve free text to a single result, collapsing every failure to None."""
        outcome = await self.lookup(query, country_code)
        if isinstance(outcome, Ok):
            return outcome.value
        return None
