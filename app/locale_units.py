"""Unit conversion and country-to-unit-system classification."""

from __future__ import annotations

from typing import Literal

from app.domain import LocaleUnits, SpeedUnit, TemperatureUnit, UnitSystem
from app.errors import ValidationError

# Matched as lowercase substrings, so "United States of America" and "USA" both hit.
IMPERIAL_COUNTRIES = (
    "United States",
    "United States of America",
    "USA",
    "US",
    "Liberia",
    "Myanmar",
    "Burma",
)

KMH_PER_MPH = 1.60934

ConversionKind = Literal["temperature", "speed"]


def classify_unit_system(country: str) -> UnitSystem:
    """Return IMPERIAL for the handful of countries that use °F/mph, else METRIC."""
    if not isinstance(country, str):
        raise ValidationError("country must be a string")
    lowered = country.lower()
    if any(name.lower() in lowered for name in IMPERIAL_COUNTRIES):
        return UnitSystem.IMPERIAL
    return UnitSystem.METRIC


def units_for_system(unit_system: UnitSystem) -> LocaleUnits:
    return LocaleUnits(
        unit_system=unit_system,
        temperature_unit=unit_system.temperature_unit,
        speed_unit=unit_system.speed_unit,
    )


def classify_locale(country: str) -> LocaleUnits:
    """Return the temperature and speed units a country's users expect."""
    return units_for_system(classify_unit_system(country))


def resolve_unit_system(country: str | None = None, temperature_unit: str | None = None) -> UnitSystem:
    """
    Pick the session's unit system: from the country when given, else from the
    temperature unit, else the documented fahrenheit/mph default.
    """
    if country:
        return classify_unit_system(country)
    if temperature_unit is None:
        return UnitSystem.IMPERIAL
    unit = _coerce_unit(temperature_unit, TemperatureUnit)
    return UnitSystem.METRIC if unit == TemperatureUnit.CELSIUS else UnitSystem.IMPERIAL


def _coerce_unit(unit, enum_cls):
    try:
        return enum_cls(getattr(unit, "value", unit))
    except ValueError:
        raise ValidationError(f"Unknown {enum_cls.__name__} '{unit}'") from None


def convert(value: float, kind: ConversionKind, from_unit, to_unit) -> float:
    """
    Convert a temperature (celsius/fahrenheit) or speed (kmh/mph).

    Intermediate values are never rounded; round only for display.
    """
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Cannot convert non-numeric value {value!r}")

    if kind == "temperature":
        src = _coerce_unit(from_unit, TemperatureUnit)
        dst = _coerce_unit(to_unit, TemperatureUnit)
        if src == dst:
            return value
        if dst == TemperatureUnit.FAHRENHEIT:
            return value * 9 / 5 + 32
        return (value - 32) * 5 / 9

    if kind == "speed":
        src = _coerce_unit(from_unit, SpeedUnit)
        dst = _coerce_unit(to_unit, SpeedUnit)
        if src == dst:
            return value
        if dst == SpeedUnit.KMH:
            return value * KMH_PER_MPH
        return value / KMH_PER_MPH

    raise ValidationError(f"Unknown conversion kind '{kind}'")


def to_fahrenheit(value: float, unit_system: UnitSystem) -> float:
    """Express a temperature in °F regardless of the session's display unit."""
    return convert(value, "temperature", unit_system.temperature_unit, TemperatureUnit.FAHRENHEIT)


def format_temperature(value: float, temperature_unit) -> str:
    """Render a temperature in both scales, e.g. '68°F / 20°C'."""
    unit = _coerce_unit(temperature_unit, TemperatureUnit)
    fahrenheit = convert(value, "temperature", unit, TemperatureUnit.FAHRENHEIT)
    celsius = convert(value, "temperature", unit, TemperatureUnit.CELSIUS)
    return f"{round(fahrenheit)}°F / {round(celsius)}°C"


def format_speed(value: float, speed_unit) -> str:
    """Render a speed in both units, e.g. '10 mph / 16 km/h'."""
    unit = _coerce_unit(speed_unit, SpeedUnit)
    mph = convert(value, "speed", unit, SpeedUnit.MPH)
    kmh = convert(value, "speed", unit, SpeedUnit.KMH)
    return f"{round(mph)} mph / {round(kmh)} km/h"
