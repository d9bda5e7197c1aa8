"""Typer CLI root application with serve command."""

import typer

from location_api.core.config import get_settings
from location_api.core.logging import setup_logging

app = typer.Typer(name="location-api", help="Place geocoding, nearby search and postal lookup CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "location_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommands and groups."""
    from location_api.cli.geocode_cmd import geocode, nearby, search
    from location_api.cli.lookup_cmd import lookup_app

    app.command("geocode")(geocode)
    app.command("search")(search)
    app.command("nearby")(nearby)
    app.add_typer(lookup_app, name="lookup", help="Postal code, city and region lookups")


_register_subcommands()
