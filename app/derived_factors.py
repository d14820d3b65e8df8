"""Wind chill, significance thresholds and granular factors for live readings."""

from __future__ import annotations

import math
from typing import Any, Mapping

from app.domain import GranularFactors, Severity, UnitSystem
from app.errors import ValidationError

# Absolute deltas, compared in whichever unit the session uses.
TEMPERATURE_SIGNIFICANT_DELTA = 5
WIND_SIGNIFICANT_DELTA = 5
PRECIPITATION_SIGNIFICANT_DELTA = 20

TEMPERATURE_HIGH_SEVERITY_DELTA = 10
WIND_HIGH_SEVERITY_DELTA = 10
PRECIPITATION_HIGH_SEVERITY_DELTA = 40

# (temperature ceiling, minimum wind) for wind chill to apply
_WIND_CHILL_FLOOR = {
    UnitSystem.IMPERIAL: (50.0, 3.0),
    UnitSystem.METRIC: (10.0, 4.8),
}

# (constant, temperature factor, wind factor, temperature*wind factor)
_WIND_CHILL_COEFFICIENTS = {
    UnitSystem.IMPERIAL: (35.74, 0.6215, 35.75, 0.4275),
    UnitSystem.METRIC: (13.12, 0.6215, 11.37, 0.3965),
}

_CARDINALS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def _get_field(reading: Any, key: str, default=None):
    """Support attribute, dict, or Mapping access for readings."""
    if reading is None:
        return default
    if isinstance(reading, Mapping):
        return reading.get(key, default)
    return getattr(reading, key, default)


def _require_number(value: Any, name: str) -> float:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return value


def _optional_number(value: Any, name: str) -> float | None:
    return None if value is None else _require_number(value, name)


def wind_chill(temperature: float, wind_speed: float, unit_system: UnitSystem) -> float:
    """
    Return the wind-chill temperature, or the input temperature unchanged when
    it is too warm or too calm for wind chill to apply.
    """
    temperature = _require_number(temperature, "temperature")
    wind_speed = _require_number(wind_speed, "wind_speed")

    ceiling, min_wind = _WIND_CHILL_FLOOR[unit_system]
    if temperature > ceiling or wind_speed < min_wind:
        return temperature

    a, b, c, d = _WIND_CHILL_COEFFICIENTS[unit_system]
    w = wind_speed ** 0.16
    return a + b * temperature - c * w + d * temperature * w


def temperature_significant(difference: float) -> bool:
    return abs(difference) > TEMPERATURE_SIGNIFICANT_DELTA


def wind_significant(difference: float) -> bool:
    return abs(difference) > WIND_SIGNIFICANT_DELTA


def precipitation_significant(difference: float) -> bool:
    return abs(difference) > PRECIPITATION_SIGNIFICANT_DELTA


def classify_severity(temperature_delta: float, wind_delta: float, precipitation_delta: float) -> Severity:
    """High when any delta crosses its high-severity bar, otherwise moderate."""
    if (
        abs(temperature_delta) > TEMPERATURE_HIGH_SEVERITY_DELTA
        or abs(wind_delta) > WIND_HIGH_SEVERITY_DELTA
        or abs(precipitation_delta) > PRECIPITATION_HIGH_SEVERITY_DELTA
    ):
        return Severity.HIGH
    return Severity.MODERATE


def cardinal_direction(degrees: float | None) -> str | None:
    """Convert a wind direction in degrees to one of eight compass points."""
    if degrees is None:
        return None
    index = int(((degrees % 360) + 22.5) // 45) % 8
    return _CARDINALS[index]


def uv_level(uv_index: float) -> str:
    """Classify a UV index into Low / Moderate / High / Very High."""
    if uv_index >= 8:
        return "Very High"
    elif uv_index >= 6:
        return "High"
    elif uv_index >= 3:
        return "Moderate"
    else:
        return "Low"


def build_granular_factors(reading: Any, unit_system: UnitSystem) -> GranularFactors:
    """
    Assemble granular factors from a live reading.

    `feels_like` is the provider's apparent temperature, not a recomputation.
    """
    temperature = _require_number(_get_field(reading, "temperature"), "temperature")
    wind_speed = _require_number(_get_field(reading, "wind_speed"), "wind_speed")
    apparent = _require_number(_get_field(reading, "apparent_temperature"), "apparent_temperature")
    humidity = _require_number(_get_field(reading, "humidity"), "humidity")

    uv_index = _optional_number(_get_field(reading, "uv_index"), "uv_index")
    uv_index = 0.0 if uv_index is None else uv_index
    gusts = _optional_number(_get_field(reading, "wind_gusts"), "wind_gusts")
    direction = _optional_number(_get_field(reading, "wind_direction"), "wind_direction")
    cloud_cover = _optional_number(_get_field(reading, "cloud_cover"), "cloud_cover")

    return GranularFactors(
        wind_chill=round(wind_chill(temperature, wind_speed, unit_system)),
        humidity=humidity,
        uv_index=round(uv_index, 1),
        cloud_cover=cloud_cover,
        wind_direction=direction,
        wind_direction_cardinal=cardinal_direction(direction),
        wind_gusts=round(gusts) if gusts is not None else None,
        feels_like=round(apparent),
        uv_level=uv_level(uv_index),
    )
