"""Upstream collaborators: geocoding, sunset, forecast and live weather."""

from .base import CallableWeatherDataSource, WeatherDataSource
from .factory import build_data_source
from .nominatim_client import sanitize_city_name, search_cities
from .open_meteo_client import (
    ForecastHour,
    LiveReading,
    fetch_forecast_hours,
    fetch_live_reading,
    fetch_timezone,
)
from .sunset_client import fetch_sunset

__all__ = [
    "build_data_source",
    "WeatherDataSource",
    "CallableWeatherDataSource",
    "ForecastHour",
    "LiveReading",
    "fetch_forecast_hours",
    "fetch_live_reading",
    "fetch_timezone",
    "fetch_sunset",
    "sanitize_city_name",
    "search_cities",
]
