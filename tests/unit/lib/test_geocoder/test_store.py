"""Unit tests for the curated location store and the bundled dataset."""

import pytest

from location_api.lib.geocoder.base import LocationType
from location_api.lib.geocoder.store import LocationRecord, LocationStore, load_default_store


class TestLocationRecord:
    """Tests for record construction from dataset rows."""

    def test_from_dict(self) -> None:
        record = LocationRecord.from_dict(
            {
                "name": "Munich",
                "name_variants": ["München"],
                "lat": 48.1351,
                "lng": 11.582,
                "country": "Germany",
                "country_code": "de",
                "region": "Bayern",
                "location_type": "city",
                "postal_codes": ["80331"],
            }
        )
        assert record.names == ("Munich", "München")
        assert record.country_code == "DE"
        assert record.location_type == LocationType.CITY
        assert record.postal_codes == ("80331",)

    def test_hierarchy_view(self) -> None:
        record = LocationRecord.from_dict(
            {"name": "Ulm", "lat": 48.4, "lng": 9.98, "country": "Germany", "country_code": "DE",
             "region": "Baden-Württemberg", "population": 126329}
        )
        hierarchy = record.hierarchy()
        assert hierarchy.city == "Ulm"
        assert hierarchy.region == "Baden-Württemberg"
        assert hierarchy.population == 126329
        assert hierarchy.coordinates == record.coordinates

    def test_invalid_coordinates_rejected(self) -> None:
        with pytest.raises(ValueError):
            LocationRecord.from_dict(
                {"name": "X", "lat": 120, "lng": 0, "country": "Germany", "country_code": "DE", "region": "R"}
            )

    def test_missing_name_rejected(self) -> None:
        with pytest.raises(KeyError):
            LocationRecord.from_dict({"lat": 1, "lng": 1, "country": "Germany", "country_code": "DE", "region": "R"})


class TestLocationStore:
    """Tests for store helpers."""

    def test_regions_sorted_and_distinct(self, small_store: LocationStore) -> None:
        assert small_store.regions() == ["Baden-Württemberg", "Bayern", "Nordrhein-Westfalen"]

    def test_find_by_postal_code(self, small_store: LocationStore) -> None:
        assert [r.name for r in small_store.find_by_postal_code(" 72762 ")] == ["Reutlingen"]
        assert small_store.find_by_postal_code("00000") == []

    def test_len_and_iter(self, small_store: LocationStore) -> None:
        assert len(small_store) == 3
        assert {r.name for r in small_store} == {"Reutlingen", "Munich", "Münster"}


class TestDefaultDataset:
    """Tests for the bundled German dataset."""

    def test_loads(self) -> None:
        store = load_default_store()
        assert len(store) >= 50
        assert all(r.country_code == "DE" for r in store)

    def test_cached_per_process(self) -> None:
        assert load_default_store() is load_default_store()

    def test_contains_major_cities(self) -> None:
        names = {r.name for r in load_default_store()}
        assert {"Berlin", "Munich", "Hamburg", "Reutlingen"} <= names

    def test_cities_by_region_most_populous_first(self) -> None:
        bavaria = load_default_store().cities_by_region("Bayern")
        assert bavaria[0].name == "Munich"
        populations = [r.population or 0 for r in bavaria]
        assert populations == sorted(populations, reverse=True)
