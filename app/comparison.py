"""Compare a forecast snapshot against live conditions and summarize the deltas."""

from __future__ import annotations

import math
from typing import Any, List, Mapping

from app.derived_factors import precipitation_significant, temperature_significant, wind_significant
from app.domain import ComparisonResult, ConditionComparison, FactorComparison, WeatherSnapshot
from app.errors import ValidationError


def fmt_number(value: float) -> str:
    """Render 68.0 as '68' and 68.5 as '68.5'."""
    rounded = round(value, 1)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.1f}"


def difference(forecast: float, actual: float, name: str) -> float:
    """Signed delta (actual - forecast); extreme inputs that overflow are rejected."""
    delta = actual - forecast
    if not math.isfinite(delta):
        raise ValidationError(f"{name} difference is out of range ({actual!r} vs {forecast!r})")
    return delta


def _factor(forecast: float, actual: float, significant, name: str) -> FactorComparison:
    delta = difference(forecast, actual, name)
    return FactorComparison(
        forecast=forecast,
        actual=actual,
        difference=delta,
        significant=significant(delta),
    )


def build_summary(
    temperature: FactorComparison,
    wind_speed: FactorComparison,
    precipitation: FactorComparison,
    condition: ConditionComparison,
) -> str:
    """Join the per-factor sentences with '. '; only notable deltas get a sentence."""
    parts: List[str] = []
    if temperature.significant:
        direction = "warmer" if temperature.difference > 0 else "cooler"
        parts.append(
            f"Temperature is {fmt_number(abs(temperature.difference))}° {direction} than predicted "
            f"({fmt_number(temperature.actual)}° vs {fmt_number(temperature.forecast)}°)"
        )
    else:
        parts.append(f"Temperature is close to forecast ({fmt_number(temperature.actual)}°)")

    if wind_speed.significant:
        direction = "windier" if wind_speed.difference > 0 else "calmer"
        parts.append(
            f"Wind is {fmt_number(abs(wind_speed.difference))} {direction} than expected "
            f"({fmt_number(wind_speed.actual)} vs {fmt_number(wind_speed.forecast)})"
        )

    if precipitation.significant:
        parts.append(
            f"Precipitation probability changed significantly "
            f"({fmt_number(precipitation.actual)}% vs {fmt_number(precipitation.forecast)}%)"
        )

    if condition.changed:
        parts.append(f"Conditions changed from {condition.forecast.value} to {condition.actual.value}")

    return ". ".join(parts)


def compare_snapshots(
    forecast: WeatherSnapshot | Mapping[str, Any],
    actual: WeatherSnapshot | Mapping[str, Any],
) -> ComparisonResult:
    """Pure function: per-factor deltas (actual - forecast), flags and a summary."""
    forecast = WeatherSnapshot.coerce(forecast)
    actual = WeatherSnapshot.coerce(actual)

    temperature = _factor(forecast.temperature, actual.temperature, temperature_significant, "temperature")
    wind_speed = _factor(forecast.wind_speed, actual.wind_speed, wind_significant, "wind_speed")
    precipitation = _factor(forecast.precipitation, actual.precipitation, precipitation_significant, "precipitation")
    condition = ConditionComparison(
        forecast=forecast.condition,
        actual=actual.condition,
        changed=forecast.condition.value.lower() != actual.condition.value.lower(),
    )

    return ComparisonResult(
        temperature=temperature,
        wind_speed=wind_speed,
        precipitation=precipitation,
        condition=condition,
        has_significant_changes=temperature.significant or wind_speed.significant or precipitation.significant,
        summary=build_summary(temperature, wind_speed, precipitation, condition),
    )
