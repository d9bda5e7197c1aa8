"""Application configuration via Pydantic Settings.

Settings are read by the outer layers only (API, CLI). Core services receive
every knob as an explicit constructor argument.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # External geocoder (Nominatim-compatible)
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim-compatible search API",
    )
    nominatim_user_agent: str = Field(
        default="location-api/1.0",
        description="User-Agent sent to the geocoder (required by the Nominatim usage policy)",
    )
    nominatim_email: str = Field(
        default="",
        description="Contact email for Nominatim usage policy compliance",
    )
    nominatim_timeout: float = Field(
        default=10.0,
        description="Geocoder request timeout in seconds",
        gt=0,
    )

    # Postal/city/region location index
    location_index_base_url: str = Field(
        default="http://localhost:8787/api",
        description="Base URL of the collaborator exposing /locations/* endpoints",
    )
    location_index_timeout: float = Field(
        default=5.0,
        description="Location index request timeout in seconds",
        gt=0,
    )

    # Search defaults
    default_countries: str = Field(
        default="DE,IT,ES,FR",
        description="Comma-separated ISO country codes searched when none are given",
    )
    nearby_default_radius_km: float = Field(
        default=25.0,
        description="Radius used when a nearby search does not specify one",
        gt=0,
    )
    nearby_default_max_results: int = Field(
        default=50,
        description="Maximum nearby results when not specified",
        gt=0,
    )

    # Caches
    geocode_cache_ttl: float = Field(
        default=86400.0,
        description="Seconds a resolved geocode stays cached",
        gt=0,
    )
    nearby_cache_ttl: float = Field(
        default=300.0,
        description="Seconds a nearby search result stays cached",
        gt=0,
    )
    lookup_cache_ttl: float = Field(
        default=600.0,
        description="Seconds a postal/city/region lookup stays cached",
        gt=0,
    )
    cache_sweep_interval: float = Field(
        default=60.0,
        description="Seconds between expired-entry sweeps",
        gt=0,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for rotating log files (stderr only when unset)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    @field_validator("location_index_base_url", "nominatim_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def default_country_list(self) -> list[str]:
        """Parse the default country string into a list of upper-case codes.

        Returns:
            Country codes in configured order, without duplicates.
        """
        codes: list[str] = []
        for part in self.default_countries.split(","):
            code = part.strip().upper()
            if code and code not in codes:
                codes.append(code)
        return codes

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
