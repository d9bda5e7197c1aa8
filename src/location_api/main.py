"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from location_api.core.config import get_settings
from location_api.core.dependencies import build_services
from location_api.core.logging import setup_logging
from location_api.lib.geocoder import run_periodic_sweep


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: wire services and run the cache sweeper."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)

    services = build_services(settings)
    app.state.services = services
    logger.info(
        "Services ready (geocoder={}, index={})",
        settings.nominatim_base_url,
        settings.location_index_base_url,
    )

    sweep_task = asyncio.create_task(run_periodic_sweep(services.caches(), settings.cache_sweep_interval))

    yield

    sweep_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweep_task


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Location API",
        description="Place-name geocoding, nearby search and postal code lookup",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    from location_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
