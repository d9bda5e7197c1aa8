"""Unit tests for core configuration module."""

import pytest
from pydantic import ValidationError

from location_api.core.config import Settings


class TestSettings:
    """Tests for Settings configuration."""

    def test_settings_defaults(self) -> None:
        """Default values are applied correctly."""
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.nominatim_base_url == "https://nominatim.openstreetmap.org"
        assert settings.nominatim_user_agent == "location-api/1.0"
        assert settings.default_country_list == ["DE", "IT", "ES", "FR"]
        assert settings.nearby_default_radius_km == 25.0
        assert settings.nearby_default_max_results == 50
        assert settings.geocode_cache_ttl == 86400.0
        assert settings.nearby_cache_ttl == 300.0
        assert settings.lookup_cache_ttl == 600.0
        assert settings.log_level == "INFO"
        assert settings.api_v1_prefix == "/api/v1"
        assert settings.cors_origin_list == []

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings load from environment variables."""
        monkeypatch.setenv("LOCATION_INDEX_BASE_URL", "https://index.example.org/api/")
        monkeypatch.setenv("NEARBY_CACHE_TTL", "30")
        monkeypatch.setenv("NOMINATIM_EMAIL", "ops@example.org")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.location_index_base_url == "https://index.example.org/api"
        assert settings.nearby_cache_ttl == 30.0
        assert settings.nominatim_email == "ops@example.org"

    def test_default_country_list_normalized(self) -> None:
        settings = Settings(_env_file=None, default_countries=" de, at,DE,, fr ")  # type: ignore[call-arg]
        assert settings.default_country_list == ["DE", "AT", "FR"]

    def test_cors_origin_list(self) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            cors_origins="http://localhost:3000, https://maps.example.org",
        )
        assert settings.cors_origin_list == ["http://localhost:3000", "https://maps.example.org"]

    @pytest.mark.parametrize("field", ["geocode_cache_ttl", "nominatim_timeout", "nearby_default_max_results"])
    def test_non_positive_values_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})  # type: ignore[call-arg]
