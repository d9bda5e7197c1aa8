"""Exact / prefix / substring name matching against the location store."""

from dataclasses import dataclass

from location_api.lib.geocoder.base import GeocodeSource, GeocodingResult, LocationHierarchy, LocationSearchResult
from location_api.lib.geocoder.scoring import (
    STATIC_CONFIDENCE_RULES,
    STATIC_PARTIAL_CONFIDENCE,
    first_match,
    score_name,
)
from location_api.lib.geocoder.store import LocationRecord, LocationStore

MIN_QUERY_LENGTH = 2
DEFAULT_MAX_RESULTS = 10


def normalize_query(query: str) -> str:
    """Trim and lower-case a free-text place query."""
    return query.strip().lower()


def format_display_name(hierarchy: LocationHierarchy) -> str:
    """Format ``city[, district], region``; the district is skipped when it repeats the city."""
    parts = [hierarchy.city]
    if hierarchy.district and hierarchy.district != hierarchy.city:
        parts.append(hierarchy.district)
    parts.append(hierarchy.region)
    return ", ".join(parts)


@dataclass(frozen=True)
class _Scored:
    record: LocationRecord
    score: float
    matched_name: str


class StaticMatcher:
    """Scores every store record against a query and ranks the hits."""

    def __init__(self, store: LocationStore) -> None:
        self._store = store

    @property
    def store(self) -> LocationStore:
        return self._store

    def _score_all(self, normalized: str) -> list[_Scored]:
        hits: list[_Scored] = []
        for record in self._store:
            scored = score_name(record.names, normalized)
            if scored is not None:
                hits.append(_Scored(record=record, score=scored[0], matched_name=scored[1]))
        hits.sort(key=lambda h: (-h.score, -(h.record.population or 0)))
        return hits

    def match(self, query: str, limit: int = DEFAULT_MAX_RESULTS) -> list[LocationSearchResult]:
        """Return ranked autocomplete rows for a query.

        Queries shorter than two characters (after trimming) return nothing.

        Args:
            query: Free-text query.
            limit: Maximum number of rows.

        Returns:
            Rows sorted by relevance descending, then population descending.
        """
        normalized = normalize_query(query)
        if len(normalized) < MIN_QUERY_LENGTH or limit <= 0:
            return []

        results: list[LocationSearchResult] = []
        for hit in self._score_all(normalized)[:limit]:
            hierarchy = hit.record.hierarchy()
            results.append(
                LocationSearchResult(
                    name=hit.matched_name,
                    display_name=format_display_name(hierarchy),
                    coordinates=hit.record.coordinates,
                    hierarchy=hierarchy,
                    relevance_score=hit.score,
                )
            )
        return results

    def best_match(self, query: str) -> GeocodingResult | None:
        """Resolve a query to the single best record.

        Confidence is 1.0 when the query equals the canonical name and 0.8 for
        anything else, including an exact match on a name variant.
        """
        normalized = normalize_query(query)
        if len(normalized) < MIN_QUERY_LENGTH:
            return None

        hits = self._score_all(normalized)
        if not hits:
            return None

        best = hits[0]
        confidence = first_match(
            STATIC_CONFIDENCE_RULES,
            best.record.name.lower(),
            normalized,
            default=STATIC_PARTIAL_CONFIDENCE,
        )
        return GeocodingResult(
            coordinates=best.record.coordinates,
            hierarchy=best.record.hierarchy(),
            source=GeocodeSource.STATIC,
            confidence=confidence,  # type: ignore[arg-type]
        )
