"""Map API endpoints — nearby search, geocode-with-nearby and reverse geocoding."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from location_api.core.dependencies import get_nearby_service
from location_api.lib.geocoder import GeographicCoordinates
from location_api.lib.spatial import optimal_zoom
from location_api.schemas.location import GeocodeWithNearbyResult, MapLocation, MapSearchResult
from location_api.services.nearby_service import NearbySearchService

map_router = APIRouter(prefix="/map", tags=["map"])


@map_router.get(
    "/nearby",
    response_model=MapSearchResult,
)
async def nearby_locations(
    lat: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    lng: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    radius_km: float = Query(25.0, gt=0, le=500, description="Search radius in kilometers"),  # noqa: B008
    countries: list[str] | None = Query(None, description="ISO country codes (repeatable)"),  # noqa: B008
    max_results: int | None = Query(None, ge=1, le=500, description="Maximum locations"),  # noqa: B008
    include_distance: bool = Query(True, description="Attach distance to each location"),  # noqa: B008
    service: NearbySearchService = Depends(get_nearby_service),  # noqa: B008
) -> MapSearchResult:
    """Find indexed places within a radius of a point."""
    return await service.search_nearby(
        GeographicCoordinates(lat=lat, lng=lng),
        radius_km,
        countries=countries,
        max_results=max_results,
        include_distance=include_distance,
    )


@map_router.get(
    "/around",
    response_model=GeocodeWithNearbyResult,
)
async def places_around(
    q: str = Query(..., min_length=2, max_length=200, description="Place name to center on"),  # noqa: B008
    radius_km: float = Query(25.0, gt=0, le=500, description="Search radius in kilometers"),  # noqa: B008
    max_nearby: int = Query(20, ge=1, le=200, description="Maximum nearby places"),  # noqa: B008
    service: NearbySearchService = Depends(get_nearby_service),  # noqa: B008
) -> GeocodeWithNearbyResult:
    """Resolve a place name and list the places around it."""
    return await service.geocode_with_nearby(q, radius_km=radius_km, max_nearby=max_nearby)


@map_router.get(
    "/reverse",
    response_model=MapLocation,
)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    lng: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    service: NearbySearchService = Depends(get_nearby_service),  # noqa: B008
) -> MapLocation:
    """Return the closest indexed place within 5 km."""
    location = await service.reverse_geocode(GeographicCoordinates(lat=lat, lng=lng))
    if location is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No indexed place within 5 km.",
        )
    return location


@map_router.get("/zoom")
async def zoom_for_radius(
    radius_km: float = Query(..., gt=0, description="Search radius in kilometers"),  # noqa: B008
) -> dict[str, int]:
    """Suggest a web-map zoom level for a radius."""
    return {"zoom": optimal_zoom(radius_km)}
