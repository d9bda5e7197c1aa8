"""Geocoder library — place resolution against a curated store with an external fallback.

Public API:
    - GeographicCoordinates / LocationHierarchy / GeocodingResult / LocationSearchResult: core types
    - LocationType / GeocodeSource / FailureReason: enums
    - Ok / Err / UpstreamError: tagged upstream outcomes and the adapter-internal error
    - LocationRecord / LocationStore / load_default_store: curated in-memory store
    - StaticMatcher: exact/prefix/substring matching with relevance scoring
    - BaseGeocoder / NominatimGeocoder: external fallback geocoder
    - TTLCache / run_periodic_sweep: expiring cache service
    - country_name / country_code / to_country_code / country_flag: shared country table
"""

from location_api.lib.geocoder.base import (
    BaseGeocoder,
    Err,
    FailureReason,
    GeocodeSource,
    GeocodingResult,
    GeographicCoordinates,
    LocationHierarchy,
    LocationSearchResult,
    LocationType,
    Ok,
    Outcome,
    UpstreamError,
)
from location_api.lib.geocoder.cache import CacheStats, TTLCache, run_periodic_sweep
from location_api.lib.geocoder.countries import country_code, country_flag, country_name, to_country_code
from location_api.lib.geocoder.matcher import StaticMatcher, format_display_name, normalize_query
from location_api.lib.geocoder.nominatim import NominatimGeocoder
from location_api.lib.geocoder.store import LocationRecord, LocationStore, load_default_store

__all__ = [
    "BaseGeocoder",
    "CacheStats",
    "Err",
    "FailureReason",
    "GeocodeSource",
    "GeocodingResult",
    "GeographicCoordinates",
    "LocationHierarchy",
    "LocationRecord",
    "LocationSearchResult",
    "LocationStore",
    "LocationType",
    "NominatimGeocoder",
    "Ok",
    "Outcome",
    "StaticMatcher",
    "TTLCache",
    "UpstreamError",
    "country_code",
    "country_flag",
    "country_name",
    "format_display_name",
    "load_default_store",
    "normalize_query",
    "run_periodic_sweep",
    "to_country_code",
]
