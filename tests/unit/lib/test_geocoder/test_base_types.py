"""Unit tests for core location types."""

import math

import pytest

from location_api.lib.geocoder.base import (
    Err,
    FailureReason,
    GeocodeSource,
    GeocodingResult,
    GeographicCoordinates,
    LocationHierarchy,
    Ok,
    UpstreamError,
)


class TestGeographicCoordinates:
    """Tests for coordinate validation."""

    def test_valid(self) -> None:
        point = GeographicCoordinates(lat=48.49, lng=9.20)
        assert (point.lat, point.lng) == (48.49, 9.20)

    @pytest.mark.parametrize(("lat", "lng"), [(90.1, 0), (-91, 0), (0, 180.5), (0, -181)])
    def test_out_of_range(self, lat: float, lng: float) -> None:
        with pytest.raises(ValueError):
            GeographicCoordinates(lat=lat, lng=lng)

    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_non_finite(self, value: float) -> None:
        with pytest.raises(ValueError, match="finite"):
            GeographicCoordinates(lat=value, lng=0)

    def test_parse_strings(self) -> None:
        assert GeographicCoordinates.parse("48.5", "9.2") == GeographicCoordinates(48.5, 9.2)

    @pytest.mark.parametrize(("lat", "lng"), [(None, 9.2), ("abc", 9.2), ("48.5", "")])
    def test_parse_rejects_garbage(self, lat: object, lng: object) -> None:
        with pytest.raises(ValueError):
            GeographicCoordinates.parse(lat, lng)


class TestGeocodingResult:
    def test_confidence_range(self) -> None:
        point = GeographicCoordinates(48.0, 9.0)
        hierarchy = LocationHierarchy(country="Germany", country_code="DE", region="R", city="C", coordinates=point)
        with pytest.raises(ValueError, match="confidence"):
            GeocodingResult(coordinates=point, hierarchy=hierarchy, source=GeocodeSource.STATIC, confidence=1.2)


class TestOutcomes:
    """Tests for the tagged upstream results."""

    def test_ok(self) -> None:
        assert Ok(1).ok is True

    def test_err(self) -> None:
        err = Err(FailureReason.NOT_FOUND)
        assert err.ok is False
        assert err == Err(FailureReason.NOT_FOUND, status_code=404)

    def test_upstream_error_message(self) -> None:
        error = UpstreamError("nominatim", "boom", status_code=502)
        assert str(error) == "nominatim: boom"
        assert error.status_code == 502
