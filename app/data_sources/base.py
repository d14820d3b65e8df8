"""Interfaces and helpers for the weather, geocoding and sunset collaborators."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, List, Protocol

from app.data_sources.open_meteo_client import ForecastHour, LiveReading
from app.domain import CityCandidate


class WeatherDataSource(Protocol):
    """Interface for anything that can answer the planner's upstream questions."""

    def search_cities(self, city: str) -> List[CityCandidate]:
        """Return geocoding candidates for a city name."""
        ...

    def fetch_timezone(self, latitude: float, longitude: float) -> str:
        """Return the IANA zone for the coordinates."""
        ...

    def fetch_sunset(self, latitude: float, longitude: float, date: dt.date) -> dt.datetime:
        """Return the UTC sunset instant for a date."""
        ...

    def fetch_forecast_hours(
        self,
        latitude: float,
        longitude: float,
        *,
        temperature_unit: str = "fahrenheit",
        wind_speed_unit: str = "mph",
    ) -> List[ForecastHour]:
        """Return the hourly forecast series."""
        ...

    def fetch_live_reading(
        self,
        latitude: float,
        longitude: float,
        *,
        temperature_unit: str = "fahrenheit",
        wind_speed_unit: str = "mph",
    ) -> LiveReading:
        """Return the current reading with its hourly UV index."""
        ...


@dataclass
class CallableWeatherDataSource(WeatherDataSource):
    """Wrap plain callables so providers can be swapped or stubbed in tests."""

    cities: Callable[..., List[CityCandidate]]
    timezone: Callable[..., str]
    sunset: Callable[..., dt.datetime]
    forecast_hours: Callable[..., List[ForecastHour]]
    live_reading: Callable[..., LiveReading]

    def search_cities(self, *args, **kwargs) -> List[CityCandidate]:
        return self.cities(*args, **kwargs)

    def fetch_timezone(self, *args, **kwargs) -> str:
        return self.timezone(*args, **kwargs)

    def fetch_sunset(self, *args, **kwargs) -> dt.datetime:
        return self.sunset(*args, **kwargs)

    def fetch_forecast_hours(self, *args, **kwargs) -> List[ForecastHour]:
        return self.forecast_hours(*args, **kwargs)

    def fetch_live_reading(self, *args, **kwargs) -> LiveReading:
        return self.live_reading(*args, **kwargs)
