"""Domain vocabulary and strict schemas for the weather-to-outfit engine.

This module defines the stable contract between the rule engine, the upstream
clients and the HTTP layer: enums, snapshots, recommendations and the results of
forecast/live comparisons. Interpretation logic lives in the engine modules;
the only behavior here is input normalization on construction.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling; NaN and infinities are rejected."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class _FrozenModel(BaseModel):
    """Immutable base model; instances are hashable and cannot be edited."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)


class UnitSystem(str, Enum):
    """Paired temperature scale and speed unit for a planning session."""
    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def temperature_unit(self) -> "TemperatureUnit":
        return TemperatureUnit.FAHRENHEIT if self is UnitSystem.IMPERIAL else TemperatureUnit.CELSIUS

    @property
    def speed_unit(self) -> "SpeedUnit":
        return SpeedUnit.MPH if self is UnitSystem.IMPERIAL else SpeedUnit.KMH

    @property
    def temperature_symbol(self) -> str:
        return "°F" if self is UnitSystem.IMPERIAL else "°C"

    @property
    def speed_label(self) -> str:
        return "mph" if self is UnitSystem.IMPERIAL else "km/h"


class TemperatureUnit(str, Enum):
    """Temperature scale names as the weather provider spells them."""
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class SpeedUnit(str, Enum):
    """Wind speed unit names as the weather provider spells them."""
    KMH = "kmh"
    MPH = "mph"


class ConditionLabel(str, Enum):
    """Coarse weather-type bucket, in ascending weather-code order."""
    CLEAR_SKY = "Clear sky"
    PARTLY_CLOUDY = "Partly cloudy"
    FOGGY = "Foggy"
    RAINY = "Rainy"
    SNOWY = "Snowy"
    RAIN_SHOWERS = "Rain showers"
    SNOW_SHOWERS = "Snow showers"
    THUNDERSTORM = "Thunderstorm"

    @property
    def is_rain(self) -> bool:
        return self in (ConditionLabel.RAINY, ConditionLabel.RAIN_SHOWERS)

    @property
    def is_snow(self) -> bool:
        return self in (ConditionLabel.SNOWY, ConditionLabel.SNOW_SHOWERS)

    @property
    def is_clear(self) -> bool:
        return self is ConditionLabel.CLEAR_SKY

    @classmethod
    def from_text(cls, value: str) -> "ConditionLabel":
        """Look up a label case-insensitively ("snowy" -> Snowy)."""
        lowered = value.strip().lower()
        for label in cls:
            if label.value.lower() == lowered:
                return label
        raise ValueError(f"Unknown condition label '{value}'")


class Severity(str, Enum):
    """How urgently an outfit revision should be surfaced."""
    MODERATE = "moderate"
    HIGH = "high"


class WeatherSnapshot(_FrozenModel):
    """One point-in-time (or one forecast-hour) weather reading."""
    temperature: float
    condition: ConditionLabel
    precipitation: float = Field(ge=0.0, le=100.0)
    wind_speed: float = Field(ge=0.0)

    @field_validator("condition", mode="before")
    @classmethod
    def normalize_condition(cls, v: Any) -> Any:
        """Accept labels in any letter case."""
        if isinstance(v, str) and not isinstance(v, ConditionLabel):
            return ConditionLabel.from_text(v)
        return v

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "WeatherSnapshot":
        """Build a snapshot, reporting bad input as a ValidationError."""
        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'snapshot'}: {err['msg']}" for err in exc.errors()
            )
            raise ValidationError(f"Invalid weather snapshot: {problems}") from exc

    @classmethod
    def coerce(cls, value: Any) -> "WeatherSnapshot":
        """Pass snapshots through; parse mappings; reject anything else."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.parse(value)
        raise ValidationError(f"Expected a weather snapshot, got {type(value).__name__}")


class GranularFactors(_StrictBaseModel):
    """Detail derived from a live reading; the forecast path never fills this."""
    wind_chill: float
    humidity: float = Field(ge=0.0, le=100.0)
    uv_index: float = Field(ge=0.0)
    cloud_cover: float | None = None
    wind_direction: float | None = None
    wind_direction_cardinal: str | None = None
    wind_gusts: float | None = None
    feels_like: float
    uv_level: str | None = None


class OutfitRecommendation(_StrictBaseModel):
    """Layered outfit; list order follows rule evaluation order."""
    outerwear: List[str] = Field(default_factory=list, max_length=3)
    shoes: List[str] = Field(default_factory=list, max_length=2)
    accessories: List[str] = Field(default_factory=list, max_length=4)


class FactorComparison(_StrictBaseModel):
    """Forecast vs actual for a numeric factor; difference is actual - forecast."""
    forecast: float
    actual: float
    difference: float
    significant: bool


class ConditionComparison(_StrictBaseModel):
    """Forecast vs actual condition label."""
    forecast: ConditionLabel
    actual: ConditionLabel
    changed: bool


class ComparisonResult(_StrictBaseModel):
    """Per-factor deltas plus a prose summary."""
    temperature: FactorComparison
    wind_speed: FactorComparison
    precipitation: FactorComparison
    condition: ConditionComparison
    has_significant_changes: bool
    summary: str


class UpdateDecision(_StrictBaseModel):
    """Whether a previously issued outfit should be revised, and why."""
    should_update: bool
    reasons: List[str] = Field(default_factory=list)
    severity: Severity | None = None


class CheckResult(_StrictBaseModel):
    """Combined output of comparing a forecast with live conditions."""
    comparison: ComparisonResult
    decision: UpdateDecision
    message: str


class LocaleUnits(_StrictBaseModel):
    """Units to request from providers and to display for a country."""
    unit_system: UnitSystem
    temperature_unit: TemperatureUnit
    speed_unit: SpeedUnit


class CityCandidate(_StrictBaseModel):
    """One geocoding match."""
    name: str
    country: str
    state: str | None = None
    lat: float
    lon: float


class DualUnitDisplay(_StrictBaseModel):
    """Readings rendered in both unit systems, e.g. '68°F / 20°C'."""
    temperature: str
    wind_speed: str
    feels_like: str | None = None
    wind_chill: str | None = None


class ForecastOutfit(_StrictBaseModel):
    """Forecast for the walk's start hour and the outfit built from it."""
    forecast_time: datetime
    weather: WeatherSnapshot
    recommendations: OutfitRecommendation
    units: LocaleUnits
    display: DualUnitDisplay


class LiveConditions(_StrictBaseModel):
    """Live reading as shown to the walker."""
    timestamp: datetime
    temperature: float
    apparent_temperature: float | None = None
    precipitation: float
    precipitation_amount: float | None = None
    wind_speed: float
    humidity: float | None = None
    condition: ConditionLabel
    weather_code: int | None = None


class WeatherCheck(_StrictBaseModel):
    """Everything the current-weather check returns."""
    current_conditions: LiveConditions
    comparison: ComparisonResult
    granular_factors: GranularFactors
    update_decision: UpdateDecision
    updated_outfit: OutfitRecommendation
    message: str
    units: LocaleUnits
    display: DualUnitDisplay


class WalkPlan(_StrictBaseModel):
    """Timing for a walk that ends at sunset."""
    city: str | None = None
    date: date
    timezone: str
    timezone_abbreviation: str
    sunset_utc: datetime
    start_utc: datetime
    sunset_time: str
    start_time: str
    walk_duration_minutes: int
    time_until_walk: str
    minutes_walking_in_dark: int | None = None
    should_have_left_by: str | None = None
