"""Factory helpers for choosing the upstream data source at startup."""

from __future__ import annotations

from app import config
from app.data_sources.base import CallableWeatherDataSource, WeatherDataSource
from app.data_sources.nominatim_client import search_cities
from app.data_sources.open_meteo_client import fetch_forecast_hours, fetch_live_reading, fetch_timezone
from app.data_sources.sunset_client import fetch_sunset
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "open_meteo"


def build_data_source(settings: config.Settings | None = None) -> WeatherDataSource:
    """Instantiate the configured data source."""
    settings = settings or config.settings
    source = (settings.weather_source or DEFAULT_SOURCE_NAME).lower()

    if source == "open_meteo":
        logger.info("Using Open-Meteo, Nominatim and sunrise-sunset data sources")
        return CallableWeatherDataSource(
            cities=search_cities,
            timezone=fetch_timezone,
            sunset=fetch_sunset,
            forecast_hours=fetch_forecast_hours,
            live_reading=fetch_live_reading,
        )

    raise ValueError(f"Unknown weather source '{source}'")
