"""Geocoding API endpoints — place name resolution and autocomplete."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from location_api.core.dependencies import get_resolver
from location_api.schemas.location import GeocodeResponse, LocationSuggestion
from location_api.services.geocoding_service import GeocodingResolver

geocoding_router = APIRouter(prefix="/geocoding", tags=["geocoding"])


@geocoding_router.get(
    "/geocode",
    response_model=GeocodeResponse,
)
async def geocode_place(
    q: str = Query(  # noqa: B008
        ...,
        min_length=2,
        max_length=200,
        description="Place name to resolve (2-200 characters)",
    ),
    preferred_country: str | None = Query(  # noqa: B008
        None, description="Country name or ISO code restricting the external lookup"
    ),
    use_cache: bool = Query(True, description="Read and write the geocode cache"),  # noqa: B008
    resolver: GeocodingResolver = Depends(get_resolver),  # noqa: B008
) -> GeocodeResponse:
    """Resolve a place name to coordinates and administrative hierarchy."""
    if len(q.strip()) < 2:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Query must contain at least 2 non-whitespace characters.",
        )

    result = await resolver.geocode(q, preferred_country=preferred_country, use_cache=use_cache)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Location could not be resolved.",
        )
    return GeocodeResponse.from_result(result)


@geocoding_router.get(
    "/search",
    response_model=list[LocationSuggestion],
)
async def search_places(
    q: str = Query(..., max_length=200, description="Autocomplete query"),  # noqa: B008
    limit: int = Query(10, ge=1, le=50, description="Maximum suggestions"),  # noqa: B008
    resolver: GeocodingResolver = Depends(get_resolver),  # noqa: B008
) -> list[LocationSuggestion]:
    """Autocomplete place names from the curated store."""
    return [LocationSuggestion.from_result(r) for r in resolver.search_locations(q, max_results=limit)]
