"""Unit tests for the Nominatim geocoder adapter."""

import httpx
import pytest
from stubs import NOMINATIM_URL, RecordingHandler, json_response

from location_api.lib.geocoder.base import Err, FailureReason, GeocodeSource, LocationType, Ok
from location_api.lib.geocoder.nominatim import NominatimGeocoder, calculate_confidence, determine_location_type

REUTLINGEN_HIT = {
    "lat": "48.4914",
    "lon": "9.2043",
    "display_name": "Reutlingen, Landkreis Reutlingen, Baden-Württemberg, Deutschland",
    "address": {
        "city": "Reutlingen",
        "county": "Landkreis Reutlingen",
        "state": "Baden-Württemberg",
        "postcode": "72764",
        "country": "Deutschland",
        "country_code": "de",
    },
    "extratags": {"population": "116,456"},
}


def _geocoder(handler: RecordingHandler, **kwargs) -> NominatimGeocoder:
    return NominatimGeocoder(base_url=NOMINATIM_URL, transport=handler.transport(), **kwargs)


class TestNominatimResponseParsing:
    """Tests for Nominatim API response parsing."""

    def setup_method(self) -> None:
        self.geocoder = NominatimGeocoder()

    def test_successful_match(self) -> None:
        result = self.geocoder._parse_response([REUTLINGEN_HIT], "Reutlingen")
        assert isinstance(result, Ok)
        geocoded = result.value
        assert geocoded.coordinates.lat == 48.4914
        assert geocoded.coordinates.lng == 9.2043
        assert geocoded.source == GeocodeSource.EXTERNAL
        assert geocoded.confidence == 0.9

        hierarchy = geocoded.hierarchy
        assert hierarchy.city == "Reutlingen"
        assert hierarchy.country_code == "DE"
        assert hierarchy.country == "Deutschland"
        assert hierarchy.region == "Baden-Württemberg"
        assert hierarchy.district == "Landkreis Reutlingen"
        assert hierarchy.postal_code == "72764"
        assert hierarchy.population == 116456
        assert hierarchy.location_type == LocationType.CITY

    def test_no_results(self) -> None:
        assert self.geocoder._parse_response([], "x") == Err(FailureReason.NOT_FOUND)

    def test_non_list_is_not_found(self) -> None:
        result = self.geocoder._parse_response({"error": "nope"}, "x")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.NOT_FOUND

    def test_malformed_coords(self) -> None:
        result = self.geocoder._parse_response([{"lat": "not-a-number", "lon": "9.0"}], "x")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.MALFORMED_DATA

    def test_missing_lat(self) -> None:
        result = self.geocoder._parse_response([{"lon": "9.0"}], "x")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.MALFORMED_DATA

    def test_out_of_range_coords(self) -> None:
        result = self.geocoder._parse_response([{"lat": "91", "lon": "9.0"}], "x")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.MALFORMED_DATA

    def test_city_falls_back_to_display_name(self) -> None:
        data = [{"lat": "47.42", "lon": "10.98", "display_name": "Zugspitze, Grainau, Bayern", "address": {}}]
        result = self.geocoder._parse_response(data, "Zugspitze")
        assert isinstance(result, Ok)
        hierarchy = result.value.hierarchy
        assert hierarchy.city == "Zugspitze"
        assert hierarchy.country == "Unknown"
        assert hierarchy.country_code == "XX"
        assert hierarchy.region == ""

    def test_unparseable_population_ignored(self) -> None:
        data = [{**REUTLINGEN_HIT, "extratags": {"population": "about 100k"}}]
        result = self.geocoder._parse_response(data, "Reutlingen")
        assert isinstance(result, Ok)
        assert result.value.hierarchy.population is None


class TestLocationType:
    """Tests for location type inference from address fields."""

    def test_city(self) -> None:
        assert determine_location_type({"city": "Ulm", "state": "BW"}) == LocationType.CITY

    def test_town(self) -> None:
        assert determine_location_type({"town": "Metzingen"}) == LocationType.TOWN

    def test_village(self) -> None:
        assert determine_location_type({"village": "Dettingen"}) == LocationType.VILLAGE

    def test_suburb_from_neighbourhood(self) -> None:
        assert determine_location_type({"neighbourhood": "Orschel-Hagen"}) == LocationType.SUBURB

    def test_region(self) -> None:
        assert determine_location_type({"state": "Bayern", "country": "Deutschland"}) == LocationType.REGION

    def test_country(self) -> None:
        assert determine_location_type({"country": "Deutschland"}) == LocationType.COUNTRY

    def test_empty_defaults_to_city(self) -> None:
        assert determine_location_type({}) == LocationType.CITY


class TestConfidence:
    """Tests for the external confidence rules."""

    def test_display_name_contains_query(self) -> None:
        assert calculate_confidence({"display_name": "Ulm, Baden-Württemberg"}, "ulm") == 0.9

    def test_component_equals_query(self) -> None:
        item = {"display_name": "Somewhere", "address": {"city": "Bar"}}
        assert calculate_confidence(item, "Bar") == 0.8

    def test_component_contains_query(self) -> None:
        item = {"display_name": "Somewhere", "address": {"city": "Barcelona"}}
        assert calculate_confidence(item, "celo") == 0.7

    def test_floor(self) -> None:
        item = {"display_name": "Somewhere", "address": {"city": "Elsewhere"}}
        assert calculate_confidence(item, "qqq") == 0.6

    def test_non_object_address_ignored(self) -> None:
        item = {"display_name": "Somewhere", "address": ["Reutlingen"]}
        assert calculate_confidence(item, "Reutlingen") == 0.6


class TestNominatimLookup:
    """Tests for the HTTP round trip through a mock transport."""

    async def test_sends_expected_params(self) -> None:
        handler = RecordingHandler(lambda request: json_response([REUTLINGEN_HIT]))
        geocoder = _geocoder(handler, email="ops@example.org", user_agent="test-agent/1.0")

        result = await geocoder.lookup("  Reutlingen ", "DE")

        assert isinstance(result, Ok)
        params = handler.params()
        assert handler.requests[0].url.path == "/search"
        assert params["q"] == "Reutlingen"
        assert params["format"] == "json"
        assert params["limit"] == "1"
        assert params["addressdetails"] == "1"
        assert params["countrycodes"] == "de"
        assert params["email"] == "ops@example.org"
        assert handler.requests[0].headers["User-Agent"] == "test-agent/1.0"

    async def test_no_country_filter_by_default(self) -> None:
        handler = RecordingHandler(lambda request: json_response([REUTLINGEN_HIT]))
        await _geocoder(handler).lookup("Reutlingen")
        assert "countrycodes" not in handler.params()
        assert "email" not in handler.params()

    async def test_empty_query_is_invalid_input(self) -> None:
        handler = RecordingHandler(lambda request: json_response([]))
        result = await _geocoder(handler).lookup("   ")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.INVALID_INPUT
        assert handler.calls == 0

    async def test_empty_results_not_found(self) -> None:
        handler = RecordingHandler(lambda request: json_response([]))
        result = await _geocoder(handler).lookup("Nowhere")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.NOT_FOUND

    async def test_http_error_is_upstream_unavailable(self) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(503, text="busy"))
        result = await _geocoder(handler).lookup("Reutlingen")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.UPSTREAM_UNAVAILABLE
        assert result.status_code == 503

    async def test_invalid_json_is_upstream_unavailable(self) -> None:
        handler = RecordingHandler(lambda request: httpx.Response(200, text="<html>"))
        result = await _geocoder(handler).lookup("Reutlingen")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.UPSTREAM_UNAVAILABLE

    async def test_timeout_is_upstream_unavailable(self) -> None:
        def raise_timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        result = await _geocoder(RecordingHandler(raise_timeout)).lookup("Reutlingen")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.UPSTREAM_UNAVAILABLE
        assert "timed out" in result.detail

    async def test_connection_error_is_upstream_unavailable(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        result = await _geocoder(RecordingHandler(refuse)).lookup("Reutlingen")
        assert isinstance(result, Err)
        assert result.reason == FailureReason.UPSTREAM_UNAVAILABLE

    @pytest.mark.parametrize(
        "respond",
        [
            lambda request: json_response([]),
            lambda request: httpx.Response(500),
        ],
    )
    async def test_resolve_collapses_failures_to_none(self, respond) -> None:
        assert await _geocoder(RecordingHandler(respond)).resolve("Reutlingen") is None

    async def test_non_object_address_does_not_raise(self) -> None:
        hit = {"lat": "48.1", "lon": "9.2", "display_name": "Somewhere", "address": ["x"]}
        handler = RecordingHandler(lambda request: json_response([hit]))

        result = await _geocoder(handler).resolve("Reutlingen")

        assert result is not None
        assert result.confidence == 0.6
        assert result.hierarchy.city == "Somewhere"
        assert result.hierarchy.country_code == "XX"

    async def test_resolve_returns_result(self) -> None:
        handler = RecordingHandler(lambda request: json_response([REUTLINGEN_HIT]))
        result = await _geocoder(handler).resolve("Reutlingen")
        assert result is not None
        assert result.hierarchy.city == "Reutlingen"


class TestNominatimProperties:
    """Tests for provider metadata."""

    def test_provider_name(self) -> None:
        assert NominatimGeocoder().provider_name == "nominatim"

    def test_rate_limit_delay(self) -> None:
        assert NominatimGeocoder().rate_limit_delay == 1.0
