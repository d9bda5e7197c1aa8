"""In-memory reference table of curated places.

Records are loaded once and never mutated; the store is read-only at query time.
"""

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import cache
from importlib import resources
from typing import Any

from location_api.lib.geocoder.base import GeographicCoordinates, LocationHierarchy, LocationType

DEFAULT_DATASET = "locations_de.json"


@dataclass(frozen=True)
class LocationRecord:
    """A curated place with coordinates, hierarchy and associated postal codes."""

    name: str
    coordinates: GeographicCoordinates
    country: str
    country_code: str
    region: str
    location_type: LocationType = LocationType.CITY
    name_variants: tuple[str, ...] = ()
    district: str | None = None
    population: int | None = None
    postal_codes: tuple[str, ...] = field(default=())

    @property
    def names(self) -> tuple[str, ...]:
        """Canonical name followed by every variant."""
        return (self.name, *self.name_variants)

    def hierarchy(self) -> LocationHierarchy:
        """Build the denormalized hierarchy view for this record."""
        return LocationHierarchy(
            country=self.country,
            country_code=self.country_code,
            region=self.region,
            district=self.district,
            city=self.name,
            coordinates=self.coordinates,
            population=self.population,
            location_type=self.location_type,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocationRecord":
        """Build a record from a dataset row.

        Raises:
            ValueError: If coordinates or location type are invalid.
            KeyError: If a required field is missing.
        """
        return cls(
            name=data["name"],
            coordinates=GeographicCoordinates.parse(data["lat"], data["lng"]),
            country=data["country"],
            country_code=data["country_code"].upper(),
            region=data["region"],
            location_type=LocationType(data.get("location_type", LocationType.CITY)),
            name_variants=tuple(data.get("name_variants") or ()),
            district=data.get("district"),
            population=data.get("population"),
            postal_codes=tuple(data.get("postal_codes") or ()),
        )


class LocationStore:
    """Immutable collection of ``LocationRecord``."""

    def __init__(self, records: Iterable[LocationRecord]) -> None:
        self._records: tuple[LocationRecord, ...] = tuple(records)

    def __iter__(self) -> Iterator[LocationRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[LocationRecord, ...]:
        return self._records

    def regions(self) -> list[str]:
        """Return every distinct region name, sorted."""
        return sorted({r.region for r in self._records})

    def cities_by_region(self, region: str) -> list[LocationRecord]:
        """Return the records of a region, most populous first."""
        return sorted(
            (r for r in self._records if r.region == region),
            key=lambda r: r.population or 0,
            reverse=True,
        )

    def find_by_postal_code(self, postal_code: str) -> list[LocationRecord]:
        """Return records listing the given postal code."""
        code = postal_code.strip()
        return [r for r in self._records if code in r.postal_codes]

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "LocationStore":
        return cls(LocationRecord.from_dict(row) for row in rows)


@cache
def load_default_store(dataset: str = DEFAULT_DATASET) -> LocationStore:
    """Load a bundled dataset from the package ``data`` directory (once per process)."""
    text = resources.files("location_api.lib.geocoder").joinpath("data", dataset).read_text(encoding="utf-8")
    return LocationStore.from_rows(json.loads(text))
