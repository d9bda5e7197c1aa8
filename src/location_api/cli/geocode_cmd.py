"""Geocoding CLI commands: resolve a place, autocomplete, search around a point."""

import asyncio

import typer

from location_api.core.config import get_settings
from location_api.core.dependencies import build_services
from location_api.lib.geocoder import GeographicCoordinates, country_flag
from location_api.lib.spatial import format_distance


def geocode(
    name: str = typer.Argument(..., help="Place name to resolve"),  # noqa: B008
    country: str | None = typer.Option(None, "--country", help="Preferred country (name or ISO code)"),  # noqa: B008
) -> None:
    """Resolve a place name to coordinates."""
    asyncio.run(_geocode(name, country))


def search(
    query: str = typer.Argument(..., help="Autocomplete query"),  # noqa: B008
    limit: int = typer.Option(10, "--limit", help="Maximum suggestions"),  # noqa: B008
) -> None:
    """Autocomplete place names from the curated store."""
    services = build_services(get_settings())
    results = services.resolver.search_locations(query, max_results=limit)
    if not results:
        typer.echo("No matches.")
        raise typer.Exit(code=1)
    for result in results:
        typer.echo(f"{result.relevance_score:.1f}  {result.display_name}")


def nearby(
    lat: float = typer.Option(..., "--lat", help="Latitude (-90 to 90)"),  # noqa: B008
    lng: float = typer.Option(..., "--lng", help="Longitude (-180 to 180)"),  # noqa: B008
    radius: float = typer.Option(25.0, "--radius", help="Search radius in km"),  # noqa: B008
    countries: list[str] | None = typer.Option(None, "--country", help="Country to search (repeatable)"),  # noqa: B008
    max_results: int = typer.Option(20, "--max-results", help="Maximum places"),  # noqa: B008
) -> None:
    """List indexed places around a point."""
    try:
        center = GeographicCoordinates(lat=lat, lng=lng)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2) from e
    asyncio.run(_nearby(center, radius, countries or None, max_results))


async def _geocode(name: str, country: str | None) -> None:
    """Async implementation of the geocode command."""
    services = build_services(get_settings())
    result = await services.resolver.geocode(name, preferred_country=country, use_cache=False)
    if result is None:
        typer.echo(f"Could not resolve {name!r}.")
        raise typer.Exit(code=1)

    hierarchy = result.hierarchy
    typer.echo(f"{country_flag(hierarchy.country_code)} {hierarchy.city}, {hierarchy.region}, {hierarchy.country}")
    typer.echo(f"  Coordinates: {result.coordinates.lat:.5f}, {result.coordinates.lng:.5f}")
    typer.echo(f"  Source:      {result.source.value}")
    typer.echo(f"  Confidence:  {result.confidence:.2f}")


async def _nearby(
    center: GeographicCoordinates,
    radius: float,
    countries: list[str] | None,
    max_results: int,
) -> None:
    """Async implementation of the nearby command."""
    services = build_services(get_settings())
    result = await services.nearby.search_nearby(center, radius, countries=countries, max_results=max_results)

    typer.echo(f"Found {result.total_found} place(s), showing {len(result.locations)}:")
    for location in result.locations:
        distance = format_distance(location.distance) if location.distance is not None else "-"
        postal = f"{location.postal_code} " if location.postal_code else ""
        typer.echo(f"  {distance:>8}  {postal}{location.name} ({location.country})")
