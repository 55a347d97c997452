"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field

from landuse_api.domain.models import compute_total_quantity
from landuse_api.infrastructure.api_constants import OverpassEndpoints


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Overpass API Configuration
    overpass_url: str = Field(
        default=OverpassEndpoints.MAIN,
        description="Overpass interpreter endpoint"
    )
    overpass_http_timeout: float = Field(
        default=40.0,
        description="HTTP timeout in seconds for Overpass requests"
    )
    overpass_query_timeout: int = Field(
        default=25,
        description="Server-side query timeout in seconds ([timeout:N])"
    )
    overpass_include_relations: bool = Field(
        default=True,
        description="Whether to also query multipolygon relations"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Point of interest and reference point
    poi_name: str = Field(
        default="Arno Ovest",
        description="Display name of the point of interest"
    )
    poi_latitude: float = Field(
        default=43.65063986776146,
        description="Latitude of the point of interest (query center)"
    )
    poi_longitude: float = Field(
        default=11.463874101163523,
        description="Longitude of the point of interest (query center)"
    )
    reference_latitude: float = Field(
        default=43.7696,
        description="Latitude of the click-distance reference point"
    )
    reference_longitude: float = Field(
        default=11.2558,
        description="Longitude of the click-distance reference point"
    )

    # Fertilizer production and requirement
    raw_input_liters: float = Field(
        default=213070.0,
        description="Collected raw input volume in liters"
    )
    conversion_ratio: float = Field(
        default=0.07,
        description="Liters of fertilizer produced per liter of raw input"
    )
    required_kg_per_hectare: float = Field(
        default=160.0,
        description="Fertilizer required per hectare of farmed land"
    )

    # Fetch lifecycle
    initial_radius_km: float = Field(
        default=5.0,
        description="Search radius used when fetching on startup"
    )
    radius_step_km: float = Field(
        default=0.5,
        description="Granularity of the radius input control"
    )
    debounce_seconds: float = Field(
        default=0.5,
        description="Delay between the last radius change and the query dispatch"
    )
    fetch_on_startup: bool = Field(
        default=False,
        description="Whether to fetch parcels for the initial radius at startup"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Land Use Fertilizer Allocation API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    @property
    def total_quantity(self) -> float:
        """Total producible fertilizer in liters."""
        return compute_total_quantity(self.raw_input_liters, self.conversion_ratio)

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
