"""Service wiring and FastAPI dependency injection.

``build_services`` turns Settings into explicitly parameterized core
services; the app lifespan stores the container on ``app.state`` and the
``get_*`` dependencies hand the individual services to endpoints.
"""

from dataclasses import dataclass

import httpx
from fastapi import Request

from location_api.core.config import Settings
from location_api.lib.geocoder import NominatimGeocoder, StaticMatcher, TTLCache, load_default_store
from location_api.lib.location_index import LocationIndexClient
from location_api.services.geocoding_service import GeocodingResolver
from location_api.services.nearby_service import NearbySearchService
from location_api.services.postal_lookup_service import PostalLookupService


@dataclass
class LocationServices:
    """Every core service of one running application."""

    resolver: GeocodingResolver
    nearby: NearbySearchService
    lookup: PostalLookupService

    def caches(self) -> list[TTLCache]:
        return [self.resolver.cache, self.nearby.cache, *self.lookup.caches]

    def clear_caches(self) -> list[str]:
        """Empty every cache and return their names."""
        names = []
        for cache in self.caches():
            cache.clear()
            names.append(cache.name)
        return names


def build_services(
    settings: Settings,
    *,
    geocoder_transport: httpx.AsyncBaseTransport | None = None,
    index_transport: httpx.AsyncBaseTransport | None = None,
) -> LocationServices:
    """Create the core services from settings.

    Args:
        settings: Application settings.
        geocoder_transport: Optional transport for the external geocoder.
        index_transport: Optional transport for the location index.

    Returns:
        The wired services container.
    """
    geocoder = NominatimGeocoder(
        base_url=settings.nominatim_base_url,
        timeout=settings.nominatim_timeout,
        email=settings.nominatim_email,
        user_agent=settings.nominatim_user_agent,
        transport=geocoder_transport,
    )
    index = LocationIndexClient(
        settings.location_index_base_url,
        timeout=settings.location_index_timeout,
        transport=index_transport,
    )
    countries = settings.default_country_list

    resolver = GeocodingResolver(
        StaticMatcher(load_default_store()),
        geocoder,
        cache=TTLCache(settings.geocode_cache_ttl, name="geocode"),
    )
    nearby = NearbySearchService(
        index,
        resolver=resolver,
        cache=TTLCache(settings.nearby_cache_ttl, name="nearby"),
        default_countries=countries,
        default_max_results=settings.nearby_default_max_results,
    )
    lookup = PostalLookupService(
        index,
        cache=TTLCache(settings.lookup_cache_ttl, name="lookup"),
        region_cache=TTLCache(settings.lookup_cache_ttl, name="region"),
        default_country=countries[0] if countries else "DE",
    )
    return LocationServices(resolver=resolver, nearby=nearby, lookup=lookup)


def get_services(request: Request) -> LocationServices:
    """Return the services container created at startup."""
    return request.app.state.services


def get_resolver(request: Request) -> GeocodingResolver:
    return get_services(request).resolver


def get_nearby_service(request: Request) -> NearbySearchService:
    return get_services(request).nearby


def get_lookup_service(request: Request) -> PostalLookupService:
    return get_services(request).lookup
