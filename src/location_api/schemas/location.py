"""Pydantic v2 schemas for geocoding, map search and postal lookup results."""

from typing import Literal

from pydantic import BaseModel, Field

from location_api.lib.geocoder.base import GeocodingResult, GeographicCoordinates, LocationHierarchy, LocationSearchResult
from location_api.lib.spatial.distance import BoundingBox

MapLocationType = Literal["search", "nearby", "listing", "user"]


class Coordinates(BaseModel):
    """A WGS84 point."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    @classmethod
    def from_point(cls, point: GeographicCoordinates) -> "Coordinates":
        return cls(lat=point.lat, lng=point.lng)

    def to_point(self) -> GeographicCoordinates:
        return GeographicCoordinates(lat=self.lat, lng=self.lng)


class HierarchyResponse(BaseModel):
    """Administrative context of a resolved place."""

    country: str
    country_code: str
    region: str
    district: str | None = None
    city: str
    suburb: str | None = None
    village: str | None = None
    postal_code: str | None = None
    coordinates: Coordinates
    population: int | None = None
    location_type: str

    @classmethod
    def from_hierarchy(cls, hierarchy: LocationHierarchy) -> "HierarchyResponse":
        return cls(
            country=hierarchy.country,
            country_code=hierarchy.country_code,
            region=hierarchy.region,
            district=hierarchy.district,
            city=hierarchy.city,
            suburb=hierarchy.suburb,
            village=hierarchy.village,
            postal_code=hierarchy.postal_code,
            coordinates=Coordinates.from_point(hierarchy.coordinates),
            population=hierarchy.population,
            location_type=hierarchy.location_type.value,
        )


class GeocodeResponse(BaseModel):
    """Response for GET /geocoding/geocode."""

    coordinates: Coordinates
    hierarchy: HierarchyResponse
    source: Literal["static", "external"]
    confidence: float = Field(..., ge=0, le=1)

    @classmethod
    def from_result(cls, result: GeocodingResult) -> "GeocodeResponse":
        return cls(
            coordinates=Coordinates.from_point(result.coordinates),
            hierarchy=HierarchyResponse.from_hierarchy(result.hierarchy),
            source=result.source.value,
            confidence=result.confidence,
        )


class LocationSuggestion(BaseModel):
    """An autocomplete row."""

    name: str
    display_name: str
    coordinates: Coordinates
    hierarchy: HierarchyResponse
    relevance_score: float = Field(..., ge=0, le=1)

    @classmethod
    def from_result(cls, result: LocationSearchResult) -> "LocationSuggestion":
        return cls(
            name=result.name,
            display_name=result.display_name,
            coordinates=Coordinates.from_point(result.coordinates),
            hierarchy=HierarchyResponse.from_hierarchy(result.hierarchy),
            relevance_score=result.relevance_score,
        )


# --- Map search ---


class MapBounds(BaseModel):
    """Padded viewport box in degrees."""

    north: float
    south: float
    east: float
    west: float

    @classmethod
    def from_box(cls, box: BoundingBox) -> "MapBounds":
        return cls(north=box.north, south=box.south, east=box.east, west=box.west)


class MapLocation(BaseModel):
    """A place shown on the map."""

    id: str
    name: str
    coordinates: Coordinates
    postal_code: str | None = None
    country: str
    region: str | None = None
    district: str | None = None
    type: MapLocationType
    distance: float | None = Field(default=None, ge=0, description="Distance from the search center in km")
    relevance_score: float | None = Field(default=None, ge=0, le=1)


class MapSearchResult(BaseModel):
    """Result of a nearby search."""

    locations: list[MapLocation]
    center: Coordinates
    bounds: MapBounds
    total_found: int = Field(..., ge=0, description="Candidates found before truncation to max_results")


class GeocodeWithNearbyResult(BaseModel):
    """A resolved place together with the places around it."""

    main: MapLocation | None = None
    nearby: list[MapLocation] = Field(default_factory=list)
    bounds: MapBounds


# --- Postal / city / region lookup ---


class PostalCodeLookupResult(BaseModel):
    """A city matching a postal code."""

    postal_code: str
    city: str
    region: str
    district: str | None = None
    country: str
    country_code: str
    coordinates: Coordinates
    confidence: float = Field(..., ge=0, le=1)
    display_name: str


class CityLookupResult(BaseModel):
    """A city with every postal code it spans."""

    city: str
    postal_codes: list[str]
    region: str
    district: str | None = None
    country: str
    country_code: str
    coordinates: Coordinates
    confidence: float = Field(..., ge=0, le=1)
    display_name: str


class RegionLookupResult(BaseModel):
    """A region with its cities, a postal code summary and its centroid."""

    region: str
    cities: list[str]
    postal_code_ranges: list[str]
    country: str
    country_code: str
    coordinates: Coordinates
    confidence: float = Field(..., ge=0, le=1)


class SmartLookupResult(BaseModel):
    """Combined postal-code and city lookup for ambiguous input."""

    looks_like_postal_code: bool
    postal_results: list[PostalCodeLookupResult]
    city_results: list[CityLookupResult]


class PostalCodeValidation(BaseModel):
    """Response for GET /lookup/validate."""

    postal_code: str
    country: str
    is_valid: bool
    formatted: str


class CacheClearResponse(BaseModel):
    """Response for DELETE /cache."""

    cleared: list[str]
