"""Shared test fixtures: fake clock, settings and a small location store."""

import pytest
from stubs import INDEX_URL, NOMINATIM_URL, FakeClock

from location_api.core.config import Settings
from location_api.lib.geocoder import LocationStore, StaticMatcher


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Test application settings pointing at stub upstreams."""
    return Settings(
        nominatim_base_url=NOMINATIM_URL,
        location_index_base_url=INDEX_URL,
        default_countries="DE,IT,ES,FR",
        log_level="DEBUG",
    )


@pytest.fixture
def small_store() -> LocationStore:
    """A three-record store covering exact, variant and prefix matching."""
    return LocationStore.from_rows(
        [
            {
                "name": "Reutlingen",
                "lat": 48.4914,
                "lng": 9.2043,
                "country": "Germany",
                "country_code": "DE",
                "region": "Baden-Württemberg",
                "district": "Reutlingen",
                "population": 116456,
                "postal_codes": ["72760", "72762", "72764"],
            },
            {
                "name": "Munich",
                "name_variants": ["München"],
                "lat": 48.1351,
                "lng": 11.582,
                "country": "Germany",
                "country_code": "DE",
                "region": "Bayern",
                "district": "München",
                "population": 1488202,
                "postal_codes": ["80331"],
            },
            {
                "name": "Münster",
                "lat": 51.9607,
                "lng": 7.6261,
                "country": "Germany",
                "country_code": "DE",
                "region": "Nordrhein-Westfalen",
                "population": 315293,
                "postal_codes": ["48143"],
            },
        ]
    )


@pytest.fixture
def small_matcher(small_store: LocationStore) -> StaticMatcher:
    return StaticMatcher(small_store)
