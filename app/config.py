"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the sunset walk planner service."""
    model_config = SettingsConfigDict(env_prefix="WALK_", extra="ignore")

    weather_source: str = "open_meteo"  # options: open_meteo
    api_key: str | None = None
    open_meteo_url: str = "https://api.open-meteo.com/v1/forecast"
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    sunset_url: str = "https://api.sunrise-sunset.org/json"
    user_agent: str = "SunsetWalkPlanner/1.0"
    http_timeout_seconds: float = 10.0
    http_cache_name: str = ".cache"
    lookup_cache_seconds: int = 86400
    forecast_days: int = 16
    city_result_limit: int = 5
    max_city_name_chars: int = 100
    default_timezone: str = "UTC"

    @field_validator("open_meteo_url", "nominatim_url", "sunset_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
