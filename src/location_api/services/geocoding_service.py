"""Geocoding service — resolves place names via the local store first, then the external geocoder.

Results are cached by normalized name.  A name neither source can resolve
yields None; callers treat that as "location unknown", never as an error.
"""

from loguru import logger

from location_api.lib.geocoder import (
    BaseGeocoder,
    CacheStats,
    Err,
    GeocodingResult,
    LocationSearchResult,
    StaticMatcher,
    TTLCache,
    normalize_query,
    to_country_code,
)
from location_api.lib.geocoder.matcher import DEFAULT_MAX_RESULTS

DEFAULT_GEOCODE_TTL = 24 * 60 * 60.0


class GeocodingResolver:
    """Two-tier resolver: static matcher, then external geocoder, with a TTL cache.

    Args:
        matcher: Matcher over the curated store.
        geocoder: External fallback geocoder.
        cache: Cache owned by this resolver (created when omitted).
    """

    def __init__(
        self,
        matcher: StaticMatcher,
        geocoder: BaseGeocoder,
        cache: TTLCache[str, GeocodingResult] | None = None,
    ) -> None:
        self._matcher = matcher
        self._geocoder = geocoder
        self._cache: TTLCache[str, GeocodingResult] = (
            TTLCache(DEFAULT_GEOCODE_TTL, name="geocode") if cache is None else cache
        )

    @property
    def cache(self) -> TTLCache[str, GeocodingResult]:
        return self._cache

    async def geocode(
        self,
        name: str,
        *,
        preferred_country: str | None = None,
        use_cache: bool = True,
    ) -> GeocodingResult | None:
        """Resolve a place name to coordinates and hierarchy.

        Args:
            name: Free-text place name.
            preferred_country: Country name or ISO code restricting the external lookup.
            use_cache: When False the cache is neither read nor written.

        Returns:
            GeocodingResult, or None when the place is unknown or the name is blank.
        """
        key = normalize_query(name)
        if not key:
            return None

        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Geocode cache hit")
                return cached

        result = self._matcher.best_match(key)
        if result is None:
            try:
                outcome = await self._geocoder.lookup(name.strip(), to_country_code(preferred_country))
            except Exception:
                logger.exception("External geocoder {} raised", self._geocoder.provider_name)
                return None
            if isinstance(outcome, Err):
                logger.debug("External geocode gave no result ({})", outcome.reason.value)
                return None
            result = outcome.value

        if result is not None and use_cache:
            self._cache.set(key, result)
        return result

    def search_locations(self, query: str, max_results: int = DEFAULT_MAX_RESULTS) -> list[LocationSearchResult]:
        """Autocomplete against the curated store (never touches the network)."""
        return self._matcher.match(query, limit=max_results)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()
