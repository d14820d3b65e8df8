"""Helpers for fetching forecast, live conditions and timezones from Open-Meteo."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional
from zoneinfo import ZoneInfo

from app.config import settings
from app.data_sources.http_session import session
from app.errors import UpstreamUnavailable, malformed_payload
from utils.logging_utils import coarse_location, get_tagged_logger
logger = get_tagged_logger(__name__, tag="open_meteo_client")

SERVICE_NAME = "open-meteo"

# Units Open-Meteo reports for each requested unit parameter.
TEMPERATURE_UNIT_LABELS = {"fahrenheit": "°F", "celsius": "°C"}
WIND_SPEED_UNIT_LABELS = {"mph": "mph", "kmh": "km/h"}

TEMPERATURE_FIELDS = ("temperature_2m", "apparent_temperature")
WIND_FIELDS = ("wind_speed_10m", "wind_gusts_10m")


@dataclass
class ForecastHour:
    """One hourly forecast entry, already in the requested units."""
    time: dt.datetime  # timezone-aware
    hour_index: int
    temperature: float
    temperature_unit: Optional[str]
    precipitation_prob: Optional[float]
    wind_speed: float
    wind_speed_unit: Optional[str]
    weather_code: Optional[int]


@dataclass
class LiveReading:
    """Current conditions plus the UV index and rain chance for the current hour."""
    time: dt.datetime  # timezone-aware
    timezone: str
    temperature: float
    temperature_unit: Optional[str]
    apparent_temperature: Optional[float]
    humidity: Optional[float]
    precipitation: Optional[float]
    precipitation_unit: Optional[str]
    precipitation_prob: Optional[float]
    weather_code: Optional[int]
    cloud_cover: Optional[float]
    wind_speed: float
    wind_speed_unit: Optional[str]
    wind_direction: Optional[float]
    wind_gusts: Optional[float]
    uv_index: Optional[float]


def _iso_to_dt_with_tz(s: str, tz_name: str) -> dt.datetime:
    """Interpret Open-Meteo local time string as being in tz_name."""
    naive = dt.datetime.fromisoformat(s)
    # Treat the given timestamp as local time in tz_name
    return naive.replace(tzinfo=ZoneInfo(tz_name))


def _warn_on_unexpected_units(units: dict, *, temperature_unit: str, wind_speed_unit: str, context: str):
    """Log a warning if Open-Meteo returns units other than the ones we asked for."""
    if not units:
        return
    expected = {f: TEMPERATURE_UNIT_LABELS.get(temperature_unit) for f in TEMPERATURE_FIELDS}
    expected.update({f: WIND_SPEED_UNIT_LABELS.get(wind_speed_unit) for f in WIND_FIELDS})
    for field, want in expected.items():
        actual = units.get(field)
        if actual and want and actual != want:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": want},
            )


def _get(url_params: dict) -> dict:
    resp = session.get(settings.open_meteo_url, params=url_params, timeout=settings.http_timeout_seconds)
    resp.raise_for_status()
    return resp.json()


def fetch_forecast_hours(
    latitude: float,
    longitude: float,
    *,
    timezone: str = "auto",
    forecast_days: int | None = None,
    temperature_unit: str = "fahrenheit",
    wind_speed_unit: str = "mph",
) -> List[ForecastHour]:
    """Fetch the hourly forecast series used to pick the walk's start hour."""
    hourly_vars = [
        "temperature_2m",
        "precipitation_probability",
        "wind_speed_10m",
        "weather_code",
    ]

    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(hourly_vars),
        "forecast_days": forecast_days or settings.forecast_days,
        "timezone": timezone,
        "temperature_unit": temperature_unit,
        "wind_speed_unit": wind_speed_unit,
    }

    logger.info("Fetching hourly forecast", extra={"location": coarse_location(latitude, longitude)})
    data = _get(params)

    with malformed_payload(SERVICE_NAME):
        tz_name = data.get("timezone") or settings.default_timezone
        hourly = data["hourly"]
        hourly_units = data.get("hourly_units", {})
        _warn_on_unexpected_units(hourly_units, temperature_unit=temperature_unit,
                                  wind_speed_unit=wind_speed_unit, context="forecast_hourly")
        times = hourly["time"]
        temp = hourly["temperature_2m"]
        wind_speed = hourly["wind_speed_10m"]
        precip_prob = hourly.get("precipitation_probability", [None] * len(times))
        codes = hourly.get("weather_code", [None] * len(times))

        out: List[ForecastHour] = []
        for i, t in enumerate(times):
            out.append(
                ForecastHour(
                    time=_iso_to_dt_with_tz(t, tz_name),
                    hour_index=i,
                    temperature=temp[i],
                    temperature_unit=hourly_units.get("temperature_2m"),
                    precipitation_prob=precip_prob[i],
                    wind_speed=wind_speed[i],
                    wind_speed_unit=hourly_units.get("wind_speed_10m"),
                    weather_code=codes[i],
                )
            )
        return out


def fetch_live_reading(
    latitude: float,
    longitude: float,
    *,
    timezone: str = "auto",
    temperature_unit: str = "fahrenheit",
    wind_speed_unit: str = "mph",
) -> LiveReading:
    """
    Fetch current conditions in a single request.

    The hourly UV index and precipitation probability series come back with
    the same call; the entry for the reading's local hour is picked out so the
    current conditions and granular factors share one upstream fetch.
    """
    current_vars = [
        "temperature_2m",
        "relative_humidity_2m",
        "apparent_temperature",
        "precipitation",
        "weather_code",
        "cloud_cover",
        "wind_speed_10m",
        "wind_direction_10m",
        "wind_gusts_10m",
    ]

    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(current_vars),
        "hourly": "uv_index,precipitation_probability",
        "forecast_days": 1,
        "timezone": timezone,
        "temperature_unit": temperature_unit,
        "wind_speed_unit": wind_speed_unit,
    }

    logger.info("Fetching live reading", extra={"location": coarse_location(latitude, longitude)})
    data = _get(params)

    with malformed_payload(SERVICE_NAME):
        tz_name = data.get("timezone") or settings.default_timezone
        current = data["current"]
        current_units = data.get("current_units", {})
        _warn_on_unexpected_units(current_units, temperature_unit=temperature_unit,
                                  wind_speed_unit=wind_speed_unit, context="live_current")
        reading_time = _iso_to_dt_with_tz(current["time"], tz_name)

        hourly = data.get("hourly") or {}
        hour_key = reading_time.replace(minute=0, second=0, microsecond=0).strftime("%Y-%m-%dT%H:%M")
        try:
            idx = hourly.get("time", []).index(hour_key)
        except ValueError:
            idx = None
            logger.debug("No hourly entry for current hour", extra={"hour": hour_key})

        def _hourly_at(field: str):
            series = hourly.get(field) or []
            if idx is None or idx >= len(series):
                return None
            return series[idx]

        return LiveReading(
            time=reading_time,
            timezone=tz_name,
            temperature=current["temperature_2m"],
            temperature_unit=current_units.get("temperature_2m"),
            apparent_temperature=current.get("apparent_temperature"),
            humidity=current.get("relative_humidity_2m"),
            precipitation=current.get("precipitation"),
            precipitation_unit=current_units.get("precipitation"),
            precipitation_prob=_hourly_at("precipitation_probability"),
            weather_code=current.get("weather_code"),
            cloud_cover=current.get("cloud_cover"),
            wind_speed=current["wind_speed_10m"],
            wind_speed_unit=current_units.get("wind_speed_10m"),
            wind_direction=current.get("wind_direction_10m"),
            wind_gusts=current.get("wind_gusts_10m"),
            uv_index=_hourly_at("uv_index"),
        )


def fetch_timezone(latitude: float, longitude: float) -> str:
    """Return the IANA zone Open-Meteo resolves for the coordinates."""
    data = _get({"latitude": latitude, "longitude": longitude, "timezone": "auto"})
    with malformed_payload(SERVICE_NAME):
        tz_name = data.get("timezone")
    if not tz_name:
        raise UpstreamUnavailable(SERVICE_NAME, "response did not include a timezone")
    return tz_name
