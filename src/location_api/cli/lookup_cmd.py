"""Lookup CLI commands for postal codes, cities and regions."""

import asyncio

import typer

from location_api.core.config import get_settings
from location_api.core.dependencies import build_services
from location_api.services.postal_lookup_service import format_postal_code, validate_postal_code

lookup_app = typer.Typer()


@lookup_app.command("postal-code")
def postal_code(
    code: str = typer.Argument(..., help="Postal code"),  # noqa: B008
    country: str | None = typer.Option(None, "--country", help="ISO country code"),  # noqa: B008
) -> None:
    """Find the cities a postal code belongs to."""
    asyncio.run(_postal_code(code, country))


@lookup_app.command("city")
def city(
    name: str = typer.Argument(..., help="City name"),  # noqa: B008
    country: str | None = typer.Option(None, "--country", help="ISO country code"),  # noqa: B008
) -> None:
    """List the postal codes of a city."""
    asyncio.run(_city(name, country))


@lookup_app.command("region")
def region(
    name: str = typer.Argument(..., help="Region name"),  # noqa: B008
    country: str | None = typer.Option(None, "--country", help="ISO country code"),  # noqa: B008
) -> None:
    """Summarize the cities and postal codes of a region."""
    asyncio.run(_region(name, country))


@lookup_app.command("validate")
def validate(
    code: str = typer.Argument(..., help="Postal code"),  # noqa: B008
    country: str = typer.Option("DE", "--country", help="ISO country code"),  # noqa: B008
) -> None:
    """Check a postal code against its country's format."""
    if validate_postal_code(code, country):
        typer.echo(f"{format_postal_code(code, country)} is a valid {country.upper()} postal code.")
        return
    typer.echo(f"{code!r} is not a valid {country.upper()} postal code.")
    raise typer.Exit(code=1)


async def _postal_code(code: str, country: str | None) -> None:
    services = build_services(get_settings())
    results = await services.lookup.lookup_by_postal_code(code, country)
    if not results:
        typer.echo("No matches.")
        raise typer.Exit(code=1)
    for result in results:
        typer.echo(f"{result.display_name}  ({result.coordinates.lat:.4f}, {result.coordinates.lng:.4f})")


async def _city(name: str, country: str | None) -> None:
    services = build_services(get_settings())
    results = await services.lookup.lookup_by_city(name, country)
    if not results:
        typer.echo("No matches.")
        raise typer.Exit(code=1)
    for result in results:
        typer.echo(f"{result.city}, {result.region}: {', '.join(result.postal_codes) or '-'}")


async def _region(name: str, country: str | None) -> None:
    services = build_services(get_settings())
    results = await services.lookup.lookup_by_region(name, country)
    if not results:
        typer.echo("No matches.")
        raise typer.Exit(code=1)
    for result in results:
        typer.echo(f"{result.region} ({result.country}): {len(result.cities)} cities")
        typer.echo(f"  Postal codes: {', '.join(result.postal_code_ranges) or '-'}")
