"""Decide whether an issued outfit needs revising and compose the explanation."""

from __future__ import annotations

from typing import Any, List, Mapping

from app.comparison import compare_snapshots, difference, fmt_number
from app.derived_factors import (
    classify_severity,
    precipitation_significant,
    temperature_significant,
    wind_significant,
)
from app.domain import (
    CheckResult,
    ComparisonResult,
    GranularFactors,
    UnitSystem,
    UpdateDecision,
    WeatherSnapshot,
)
from app.locale_units import to_fahrenheit
from app.outfit_rules import coerce_unit_system

# Commentary gates, always compared in °F.
COLD_FLOOR_F = 40
HOT_FLOOR_F = 75
FEELS_LIKE_MIN_GAP = 3
HUMID_THRESHOLD = 70
VERY_MUGGY_THRESHOLD = 80


def decide_update(
    original: WeatherSnapshot | Mapping[str, Any],
    current: WeatherSnapshot | Mapping[str, Any],
    unit_system: UnitSystem | str = UnitSystem.IMPERIAL,
) -> UpdateDecision:
    """Return should_update, one reason per tripped threshold, and a severity."""
    original = WeatherSnapshot.coerce(original)
    current = WeatherSnapshot.coerce(current)
    units = coerce_unit_system(unit_system)

    temp_change = abs(difference(original.temperature, current.temperature, "temperature"))
    wind_change = abs(difference(original.wind_speed, current.wind_speed, "wind_speed"))
    precip_change = abs(difference(original.precipitation, current.precipitation, "precipitation"))

    reasons: List[str] = []
    if temperature_significant(temp_change):
        reasons.append(f"Temperature changed by {fmt_number(temp_change)}{units.temperature_symbol}")
    if wind_significant(wind_change):
        reasons.append(f"Wind speed changed by {fmt_number(wind_change)} {units.speed_label}")
    if precipitation_significant(precip_change):
        reasons.append(f"Precipitation probability changed by {fmt_number(precip_change)}%")

    should_update = bool(reasons)
    return UpdateDecision(
        should_update=should_update,
        reasons=reasons,
        severity=classify_severity(temp_change, wind_change, precip_change) if should_update else None,
    )


def generate_message(
    comparison: ComparisonResult,
    factors: GranularFactors | None,
    current: WeatherSnapshot | Mapping[str, Any],
    unit_system: UnitSystem | str = UnitSystem.IMPERIAL,
) -> str:
    """
    Comparator summary, then feels-like and humidity remarks when they matter.

    Feels-like is only mentioned when it is cold and noticeably different from
    the actual temperature; humidity only when it is hot and sticky.
    """
    current = WeatherSnapshot.coerce(current)
    units = coerce_unit_system(unit_system)

    parts: List[str] = [f"{comparison.summary}."]
    if factors is None:
        return " ".join(parts)

    current_f = to_fahrenheit(current.temperature, units)

    gap = abs(factors.feels_like - current.temperature)
    if current_f < COLD_FLOOR_F and gap >= FEELS_LIKE_MIN_GAP:
        relative = "colder" if factors.feels_like < current.temperature else "warmer"
        parts.append(
            f"Feels like {fmt_number(factors.feels_like)}{units.temperature_symbol} "
            f"({relative} than actual temperature)."
        )

    if current_f >= HOT_FLOOR_F and factors.humidity > HUMID_THRESHOLD:
        impact = "very muggy" if factors.humidity > VERY_MUGGY_THRESHOLD else "humid"
        parts.append(f"Humidity is {fmt_number(factors.humidity)}% ({impact} - will feel hotter).")

    return " ".join(parts)


def compare_and_decide(
    forecast: WeatherSnapshot | Mapping[str, Any],
    live: WeatherSnapshot | Mapping[str, Any],
    unit_system: UnitSystem | str = UnitSystem.IMPERIAL,
    factors: GranularFactors | None = None,
) -> CheckResult:
    """Compare forecast with live conditions, decide on an update, explain it."""
    forecast = WeatherSnapshot.coerce(forecast)
    live = WeatherSnapshot.coerce(live)
    units = coerce_unit_system(unit_system)

    comparison = compare_snapshots(forecast, live)
    decision = decide_update(forecast, live, units)
    message = generate_message(comparison, factors, live, units)
    return CheckResult(comparison=comparison, decision=decision, message=message)
