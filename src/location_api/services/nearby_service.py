"""Nearby search service — radius queries fanned out across country partitions.

Each country is queried concurrently against the location index; a country
whose request fails contributes nothing and never fails the whole search.
"""

import asyncio
import math
from collections.abc import Sequence

from loguru import logger

from location_api.lib.geocoder import CacheStats, Err, FailureReason, GeographicCoordinates, TTLCache
from location_api.lib.location_index import IndexRow, LocationIndexClient
from location_api.lib.spatial import calculate_bounds, haversine_km
from location_api.schemas.location import (
    Coordinates,
    GeocodeWithNearbyResult,
    MapBounds,
    MapLocation,
    MapLocationType,
    MapSearchResult,
)
from location_api.services.geocoding_service import GeocodingResolver

DEFAULT_COUNTRIES: tuple[str, ...] = ("DE", "IT", "ES", "FR")
DEFAULT_MAX_RESULTS = 50
DEFAULT_NEARBY_TTL = 5 * 60.0
REVERSE_GEOCODE_RADIUS_KM = 5.0

NearbyCacheKey = tuple[float, float, float, tuple[str, ...], int, bool]


def _clamp_score(value: float | None) -> float | None:
    if value is None or math.isnan(value):
        return None
    return min(max(value, 0.0), 1.0)


def _to_map_location(
    row: IndexRow,
    country: str,
    distance_km: float | None,
    location_type: MapLocationType = "nearby",
) -> MapLocation:
    country_code = row.country_code or country
    return MapLocation(
        id=f"{country_code}-{row.postal_code or ''}-{row.id or row.name}",
        name=row.name,
        coordinates=Coordinates.from_point(row.coordinates),
        postal_code=row.postal_code,
        country=country_code,
        region=row.region,
        district=row.district,
        type=location_type,
        distance=distance_km,
        relevance_score=_clamp_score(row.relevance_score if row.relevance_score is not None else row.confidence),
    )


class NearbySearchService:
    """Finds indexed places around a point and frames them in a map viewport.

    Args:
        index: Client for the location index.
        resolver: Geocoding resolver used by ``geocode_with_nearby``.
        cache: Result cache owned by this service (created when omitted).
        default_countries: Countries searched when a call names none.
        default_max_results: Result cap when a call gives none.
    """

    def __init__(
        self,
        index: LocationIndexClient,
        resolver: GeocodingResolver | None = None,
        cache: TTLCache[NearbyCacheKey, MapSearchResult] | None = None,
        default_countries: Sequence[str] = DEFAULT_COUNTRIES,
        default_max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self._index = index
        self._resolver = resolver
        self._cache: TTLCache[NearbyCacheKey, MapSearchResult] = (
            TTLCache(DEFAULT_NEARBY_TTL, name="nearby") if cache is None else cache
        )
        self._default_countries = tuple(c.upper() for c in default_countries)
        self._default_max_results = default_max_results

    @property
    def cache(self) -> TTLCache[NearbyCacheKey, MapSearchResult]:
        return self._cache

    async def _search_country(
        self,
        center: GeographicCoordinates,
        radius_km: float,
        country: str,
        limit: int,
        include_distance: bool,
    ) -> tuple[list[tuple[float, MapLocation]], bool]:
        """Query one country; returns ``(distance, location)`` pairs and whether the request failed."""
        outcome = await self._index.nearby(center, radius_km, country, limit)
        if isinstance(outcome, Err):
            # NOT_FOUND is an empty country, anything else is an upstream problem
            return [], outcome.reason is not FailureReason.NOT_FOUND

        pairs: list[tuple[float, MapLocation]] = []
        for row in outcome.value:
            distance = haversine_km(center, row.coordinates)
            pairs.append((distance, _to_map_location(row, country, distance if include_distance else None)))
        return pairs, False

    async def search_nearby(
        self,
        center: GeographicCoordinates,
        radius_km: float,
        countries: Sequence[str] | None = None,
        max_results: int | None = None,
        *,
        include_distance: bool = True,
    ) -> MapSearchResult:
        """Search every requested country around ``center`` and merge by distance.

        Each country is asked for ``ceil(max_results / len(countries))``
        candidates.  The merged list is sorted by distance ascending and cut to
        ``max_results``; ``total_found`` counts candidates before the cut.

        Args:
            center: Search center.
            radius_km: Search radius in kilometers.
            countries: ISO codes to search (defaults to the configured list).
            max_results: Maximum locations returned.
            include_distance: Whether each location carries its distance.

        Returns:
            MapSearchResult; empty when nothing is found or every country fails.
        """
        country_list = tuple(dict.fromkeys(c.strip().upper() for c in (countries or self._default_countries) if c))
        limit_total = self._default_max_results if max_results is None else max_results

        if not country_list or limit_total <= 0 or radius_km <= 0:
            return MapSearchResult(
                locations=[],
                center=Coordinates.from_point(center),
                bounds=MapBounds.from_box(calculate_bounds([center])),
                total_found=0,
            )

        key: NearbyCacheKey = (center.lat, center.lng, radius_km, country_list, limit_total, include_distance)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Nearby cache hit")
            return cached

        per_country = math.ceil(limit_total / len(country_list))
        outcomes = await asyncio.gather(
            *(
                self._search_country(center, radius_km, country, per_country, include_distance)
                for country in country_list
            ),
            return_exceptions=True,
        )

        candidates: list[tuple[float, MapLocation]] = []
        failed = 0
        for country, outcome in zip(country_list, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("Nearby search for {} raised: {}", country, outcome)
                failed += 1
                continue
            pairs, country_failed = outcome
            failed += int(country_failed)
            candidates.extend(pairs)

        candidates.sort(key=lambda pair: pair[0])
        locations = [location for _, location in candidates[:limit_total]]
        bounds = calculate_bounds([center, *(loc.coordinates.to_point() for loc in locations)])

        result = MapSearchResult(
            locations=locations,
            center=Coordinates.from_point(center),
            bounds=MapBounds.from_box(bounds),
            total_found=len(candidates),
        )

        if failed:
            logger.warning("Nearby search degraded: {}/{} countries failed", failed, len(country_list))
        else:
            self._cache.set(key, result)
        return result

    async def geocode_with_nearby(
        self,
        name: str,
        radius_km: float = 25.0,
        max_nearby: int = 20,
    ) -> GeocodeWithNearbyResult:
        """Resolve a place name and list the indexed places around it.

        Returns:
            The main place (``type="search"``), nearby places and bounds over
            both; an unknown name gives ``main=None`` and zero bounds.
        """
        if self._resolver is None:
            msg = "geocode_with_nearby requires a GeocodingResolver"
            raise RuntimeError(msg)

        resolved = await self._resolver.geocode(name)
        if resolved is None:
            return GeocodeWithNearbyResult(main=None, nearby=[], bounds=MapBounds(north=0, south=0, east=0, west=0))

        hierarchy = resolved.hierarchy
        main = MapLocation(
            id=f"main-{name}",
            name=hierarchy.city,
            coordinates=Coordinates.from_point(resolved.coordinates),
            postal_code=hierarchy.postal_code,
            country=hierarchy.country_code,
            region=hierarchy.region or None,
            district=hierarchy.district,
            type="search",
        )
        nearby = await self.search_nearby(resolved.coordinates, radius_km, max_results=max_nearby, include_distance=True)
        bounds = calculate_bounds([resolved.coordinates, *(loc.coordinates.to_point() for loc in nearby.locations)])
        return GeocodeWithNearbyResult(main=main, nearby=nearby.locations, bounds=MapBounds.from_box(bounds))

    async def reverse_geocode(self, coordinates: GeographicCoordinates) -> MapLocation | None:
        """Return the closest indexed place within 5 km, or None."""
        result = await self.search_nearby(coordinates, REVERSE_GEOCODE_RADIUS_KM, max_results=1, include_distance=True)
        if not result.locations:
            return None
        return result.locations[0].model_copy(update={"type": "search"})

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()
