"""Root API router with /api/v1 prefix."""

from fastapi import APIRouter, Depends, FastAPI

from location_api.core.config import Settings
from location_api.core.dependencies import LocationServices, get_services
from location_api.schemas.location import CacheClearResponse

cache_router = APIRouter(prefix="/cache", tags=["cache"])


@cache_router.delete("", response_model=CacheClearResponse)
async def clear_caches(services: LocationServices = Depends(get_services)) -> CacheClearResponse:  # noqa: B008
    """Drop every cached geocode, nearby search and lookup."""
    return CacheClearResponse(cleared=services.clear_caches())


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from location_api.api.v1.geocoding import geocoding_router
    from location_api.api.v1.lookup import lookup_router
    from location_api.api.v1.map import map_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(geocoding_router)
    root_router.include_router(map_router)
    root_router.include_router(lookup_router)
    root_router.include_router(cache_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    from location_api.api.middleware import RequestTimingMiddleware, setup_cors

    setup_cors(app, settings)
    app.add_middleware(RequestTimingMiddleware)
