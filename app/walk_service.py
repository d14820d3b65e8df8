"""Orchestrate upstream lookups and the outfit engine for each planning step."""
from __future__ import annotations

import datetime as dt
from typing import Any, Callable, List, Mapping, TypeVar

import requests
from pydantic import ValidationError as PydanticValidationError

from app.conditions import classify_weather_code
from app.config import settings
from app.data_sources import WeatherDataSource, build_data_source
from app.data_sources.open_meteo_client import ForecastHour, LiveReading
from app.derived_factors import build_granular_factors
from app.domain import (
    CityCandidate,
    DualUnitDisplay,
    ForecastOutfit,
    LiveConditions,
    UnitSystem,
    WalkPlan,
    WeatherCheck,
    WeatherSnapshot,
)
from app.errors import UpstreamUnavailable, ValidationError
from app.locale_units import format_speed, format_temperature, units_for_system
from app.outfit_rules import FORECAST_RULES, LIVE_CHECK_RULES, synthesize_outfit
from app.update_decision import compare_and_decide
from app.walk_planner import plan_walk, resolve_walk_date, walk_duration_minutes
from utils.logging_utils import coarse_location, get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/walk_service")

T = TypeVar("T")

# Values from a provider that cannot form a snapshot or a display string.
_UNUSABLE_READING = (ValidationError, PydanticValidationError, ValueError, OverflowError, TypeError)


def _call_upstream(service: str, fn: Callable[..., T], *args, **kwargs) -> T:
    """
    Run an upstream call, turning transport failures into UpstreamUnavailable.

    Malformed bodies are mapped by the clients themselves; any other exception
    is a bug and propagates.
    """
    try:
        return fn(*args, **kwargs)
    except requests.RequestException as exc:
        logger.error("Upstream call failed", extra={"service": service, "error": str(exc)})
        raise UpstreamUnavailable(service, f"request failed ({type(exc).__name__}: {exc})") from exc


def _source(data_source: WeatherDataSource | None) -> WeatherDataSource:
    return data_source or build_data_source(settings)


def search_cities(city: str, *, data_source: WeatherDataSource | None = None) -> List[CityCandidate]:
    """Geocode a city name; more than one result means the caller must disambiguate."""
    return _call_upstream("nominatim", _source(data_source).search_cities, city)


def lookup_timezone(latitude: float, longitude: float, *, data_source: WeatherDataSource | None = None) -> str:
    """Resolve the location's zone, falling back to the configured default on failure."""
    try:
        return _call_upstream("open-meteo", _source(data_source).fetch_timezone, latitude, longitude)
    except UpstreamUnavailable as exc:
        logger.warning(
            "Timezone lookup failed; using default",
            extra={"location": coarse_location(latitude, longitude), "error": exc.message,
                   "timezone": settings.default_timezone},
        )
        return settings.default_timezone


def plan_walk_for_location(
    latitude: float,
    longitude: float,
    date: str | dt.date,
    hours: int | None,
    minutes: int | None,
    *,
    city: str | None = None,
    now: dt.datetime | None = None,
    data_source: WeatherDataSource | None = None,
) -> WalkPlan:
    """Find sunset for the date and work back to when the walk should start."""
    ds = _source(data_source)
    duration = walk_duration_minutes(hours, minutes)
    tz_name = lookup_timezone(latitude, longitude, data_source=ds)
    walk_date = resolve_walk_date(date, tz_name, now)

    sunset_utc = _call_upstream("sunrise-sunset", ds.fetch_sunset, latitude, longitude, walk_date)
    plan = plan_walk(sunset_utc, duration, tz_name, walk_date=walk_date, city=city, now=now)
    logger.info(
        "Planned walk",
        extra={"location": coarse_location(latitude, longitude), "date": walk_date.isoformat(),
               "start_utc": plan.start_utc.isoformat(), "duration_minutes": duration},
    )
    return plan


def select_forecast_hour(hours: List[ForecastHour], start: dt.datetime) -> ForecastHour:
    """First hour at or after the start time; the first hour when none qualifies."""
    if not hours:
        raise UpstreamUnavailable("open-meteo", "forecast contained no hours")
    for hour in hours:
        if hour.time >= start:
            return hour
    logger.debug("Start time beyond forecast range; using first hour", extra={"start": start.isoformat()})
    return hours[0]


def _upstream_snapshot(source: str, temperature, weather_code, precipitation_prob, wind_speed) -> WeatherSnapshot:
    if precipitation_prob is None:
        raise UpstreamUnavailable("open-meteo", f"{source} missing precipitation probability")
    try:
        return WeatherSnapshot.parse({
            "temperature": round(temperature),
            "condition": classify_weather_code(weather_code),
            "precipitation": precipitation_prob,
            "wind_speed": round(wind_speed),
        })
    except _UNUSABLE_READING as exc:
        raise UpstreamUnavailable("open-meteo", f"unusable {source} ({exc})") from exc


def snapshot_from_forecast(hour: ForecastHour) -> WeatherSnapshot:
    """Forecast hour -> snapshot; temperature and wind are rounded to whole units."""
    return _upstream_snapshot(
        "forecast hour", hour.temperature, hour.weather_code, hour.precipitation_prob, hour.wind_speed
    )


def snapshot_from_live(reading: LiveReading) -> WeatherSnapshot:
    """Live reading -> snapshot, using the current hour's precipitation probability."""
    return _upstream_snapshot(
        "live reading", reading.temperature, reading.weather_code, reading.precipitation_prob, reading.wind_speed
    )


def _live_conditions(reading: LiveReading, snapshot: WeatherSnapshot) -> LiveConditions:
    apparent = reading.apparent_temperature
    return LiveConditions(
        timestamp=reading.time,
        temperature=snapshot.temperature,
        apparent_temperature=round(apparent) if apparent is not None else None,
        precipitation=snapshot.precipitation,
        precipitation_amount=reading.precipitation,
        wind_speed=snapshot.wind_speed,
        humidity=reading.humidity,
        condition=snapshot.condition,
        weather_code=reading.weather_code,
    )


def dual_unit_display(
    snapshot: WeatherSnapshot,
    unit_system: UnitSystem,
    *,
    feels_like: float | None = None,
    wind_chill: float | None = None,
) -> DualUnitDisplay:
    """Render a snapshot's readings in both °F/°C and mph/km/h."""
    temperature_unit = unit_system.temperature_unit
    return DualUnitDisplay(
        temperature=format_temperature(snapshot.temperature, temperature_unit),
        wind_speed=format_speed(snapshot.wind_speed, unit_system.speed_unit),
        feels_like=format_temperature(feels_like, temperature_unit) if feels_like is not None else None,
        wind_chill=format_temperature(wind_chill, temperature_unit) if wind_chill is not None else None,
    )


def forecast_outfit(
    latitude: float,
    longitude: float,
    start: dt.datetime,
    unit_system: UnitSystem,
    *,
    data_source: WeatherDataSource | None = None,
) -> ForecastOutfit:
    """Forecast the walk's start hour and recommend an outfit for it."""
    if start.tzinfo is None:
        raise ValidationError("start time must be timezone-aware")
    ds = _source(data_source)
    hours = _call_upstream(
        "open-meteo",
        ds.fetch_forecast_hours,
        latitude,
        longitude,
        temperature_unit=unit_system.temperature_unit.value,
        wind_speed_unit=unit_system.speed_unit.value,
    )
    hour = select_forecast_hour(hours, start)
    snapshot = snapshot_from_forecast(hour)
    try:
        display = dual_unit_display(snapshot, unit_system)
    except _UNUSABLE_READING as exc:
        raise UpstreamUnavailable("open-meteo", f"unusable forecast hour ({exc})") from exc
    outfit = synthesize_outfit(snapshot, unit_system, FORECAST_RULES)
    logger.info(
        "Forecast outfit ready",
        extra={"location": coarse_location(latitude, longitude), "forecast_time": hour.time.isoformat(),
               "condition": snapshot.condition.value},
    )
    return ForecastOutfit(
        forecast_time=hour.time,
        weather=snapshot,
        recommendations=outfit,
        units=units_for_system(unit_system),
        display=display,
    )


def check_current_weather(
    latitude: float,
    longitude: float,
    forecast: WeatherSnapshot | Mapping[str, Any],
    unit_system: UnitSystem,
    *,
    data_source: WeatherDataSource | None = None,
) -> WeatherCheck:
    """
    Compare the original forecast with live conditions and re-run the outfit.

    Current conditions, the comparison and granular factors all come from one
    live fetch.
    """
    forecast = WeatherSnapshot.coerce(forecast)
    ds = _source(data_source)
    reading = _call_upstream(
        "open-meteo",
        ds.fetch_live_reading,
        latitude,
        longitude,
        temperature_unit=unit_system.temperature_unit.value,
        wind_speed_unit=unit_system.speed_unit.value,
    )
    live = snapshot_from_live(reading)
    try:
        factors = build_granular_factors(reading, unit_system)
        current = _live_conditions(reading, live)
        display = dual_unit_display(
            live, unit_system, feels_like=factors.feels_like, wind_chill=factors.wind_chill
        )
    except _UNUSABLE_READING as exc:
        raise UpstreamUnavailable("open-meteo", f"incomplete live reading ({exc})") from exc

    result = compare_and_decide(forecast, live, unit_system, factors=factors)
    outfit = synthesize_outfit(live, unit_system, LIVE_CHECK_RULES)

    logger.info(
        "Weather check complete",
        extra={"location": coarse_location(latitude, longitude),
               "should_update": result.decision.should_update,
               "severity": result.decision.severity.value if result.decision.severity else None},
    )
    return WeatherCheck(
        current_conditions=current,
        comparison=result.comparison,
        granular_factors=factors,
        update_decision=result.decision,
        updated_outfit=outfit,
        message=result.message,
        units=units_for_system(unit_system),
        display=display,
    )
