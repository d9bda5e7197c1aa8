"""Lookup API endpoints — postal code, city and region resolution."""

from fastapi import APIRouter, Depends, Query

from location_api.core.dependencies import get_lookup_service
from location_api.schemas.location import (
    CityLookupResult,
    PostalCodeLookupResult,
    PostalCodeValidation,
    RegionLookupResult,
    SmartLookupResult,
)
from location_api.services.postal_lookup_service import (
    PostalLookupService,
    format_postal_code,
    validate_postal_code,
)

lookup_router = APIRouter(prefix="/lookup", tags=["lookup"])

_COUNTRY = Query(None, min_length=2, max_length=2, description="ISO 3166-1 alpha-2 country code")


@lookup_router.get("/postal-code", response_model=list[PostalCodeLookupResult])
async def lookup_postal_code(
    postal_code: str = Query(..., max_length=16),  # noqa: B008
    country: str | None = _COUNTRY,
    service: PostalLookupService = Depends(get_lookup_service),  # noqa: B008
) -> list[PostalCodeLookupResult]:
    """Find the cities a postal code belongs to."""
    return await service.lookup_by_postal_code(postal_code, country)


@lookup_router.get("/city", response_model=list[CityLookupResult])
async def lookup_city(
    city: str = Query(..., max_length=200),  # noqa: B008
    country: str | None = _COUNTRY,
    service: PostalLookupService = Depends(get_lookup_service),  # noqa: B008
) -> list[CityLookupResult]:
    """Find the postal codes of a city."""
    return await service.lookup_by_city(city, country)


@lookup_router.get("/region", response_model=list[RegionLookupResult])
async def lookup_region(
    region: str = Query(..., max_length=200),  # noqa: B008
    country: str | None = _COUNTRY,
    service: PostalLookupService = Depends(get_lookup_service),  # noqa: B008
) -> list[RegionLookupResult]:
    """Summarize the cities and postal codes of a region."""
    return await service.lookup_by_region(region, country)


@lookup_router.get("/smart", response_model=SmartLookupResult)
async def smart_lookup(
    q: str = Query(..., max_length=200),  # noqa: B008
    country: str | None = _COUNTRY,
    service: PostalLookupService = Depends(get_lookup_service),  # noqa: B008
) -> SmartLookupResult:
    """Look up input that may be either a postal code or a city name."""
    return await service.smart_lookup(q, country)


@lookup_router.get("/validate", response_model=PostalCodeValidation)
async def validate(
    postal_code: str = Query(..., max_length=16),  # noqa: B008
    country: str = Query("DE", min_length=2, max_length=2),  # noqa: B008
) -> PostalCodeValidation:
    """Check a postal code against its country's format."""
    return PostalCodeValidation(
        postal_code=postal_code,
        country=country.upper(),
        is_valid=validate_postal_code(postal_code, country),
        formatted=format_postal_code(postal_code, country),
    )
