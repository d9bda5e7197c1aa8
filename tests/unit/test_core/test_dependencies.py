"""Tests for service wiring and FastAPI dependency providers."""

from unittest.mock import MagicMock

from location_api.core.config import Settings
from location_api.core.dependencies import (
    build_services,
    get_lookup_service,
    get_nearby_service,
    get_resolver,
    get_services,
)


class TestBuildServices:
    """Tests for build_services()."""

    def test_cache_ttls_from_settings(self, settings: Settings) -> None:
        settings = settings.model_copy(
            update={"geocode_cache_ttl": 11.0, "nearby_cache_ttl": 22.0, "lookup_cache_ttl": 33.0}
        )
        services = build_services(settings)
        assert [(cache.name, cache.default_ttl) for cache in services.caches()] == [
            ("geocode", 11.0),
            ("nearby", 22.0),
            ("lookup", 33.0),
            ("region", 33.0),
        ]

    def test_clear_caches(self, settings: Settings) -> None:
        services = build_services(settings)
        services.resolver.cache.set("x", MagicMock())
        services.lookup.caches[1].set(("region", "x", "DE"), [])

        cleared = services.clear_caches()

        assert cleared == ["geocode", "nearby", "lookup", "region"]
        assert all(len(cache) == 0 for cache in services.caches())

    def test_resolver_uses_bundled_store(self, settings: Settings) -> None:
        services = build_services(settings)
        assert [r.hierarchy.city for r in services.resolver.search_locations("Reutlingen")] == ["Reutlingen"]


class TestDependencyProviders:
    """Tests for the get_* FastAPI dependencies."""

    def test_providers_read_app_state(self, settings: Settings) -> None:
        services = build_services(settings)
        request = MagicMock()
        request.app.state.services = services

        assert get_services(request) is services
        assert get_resolver(request) is services.resolver
        assert get_nearby_service(request) is services.nearby
        assert get_lookup_service(request) is services.lookup
