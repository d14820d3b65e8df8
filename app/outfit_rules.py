"""Deterministic outfit synthesis.

Turns a weather snapshot plus a unit system into layered outfit suggestions.
Thresholds live in an explicit OutfitThresholds structure (one imperial and one
metric literal per cutoff, never a converted value) and the small differences
between the forecast-time and live-check outfits are captured as named
OutfitRuleSet values.
"""

from __future__ import annotations

from typing import Any, List, Mapping

from pydantic import BaseModel, ConfigDict

from app.domain import OutfitRecommendation, UnitSystem, WeatherSnapshot
from app.errors import ValidationError

MAX_OUTERWEAR = 3
MAX_SHOES = 2
MAX_ACCESSORIES = 4

WINTER_HAT = "Winter hat"
BEANIE = "Beanie or winter hat"
GLOVES = "Gloves"
SCARF = "Scarf"


class _FrozenConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class UnitThreshold(_FrozenConfig):
    """A cutoff expressed once per unit system."""
    imperial: float
    metric: float

    def for_units(self, unit_system: UnitSystem) -> float:
        return self.imperial if unit_system is UnitSystem.IMPERIAL else self.metric


class OutfitThresholds(_FrozenConfig):
    """Every cutoff the outfit rules consult."""
    hot: UnitThreshold = UnitThreshold(imperial=75, metric=24)
    warm: UnitThreshold = UnitThreshold(imperial=60, metric=15)
    cool: UnitThreshold = UnitThreshold(imperial=45, metric=7)
    cold: UnitThreshold = UnitThreshold(imperial=32, metric=0)
    chill: UnitThreshold = UnitThreshold(imperial=40, metric=4)
    wind_comfort: UnitThreshold = UnitThreshold(imperial=50, metric=10)
    heat: UnitThreshold = UnitThreshold(imperial=70, metric=21)
    windy: UnitThreshold = UnitThreshold(imperial=15, metric=24)
    # percent, unit independent
    precipitation_heavy: float = 50
    precipitation_light: float = 20


class OutfitRuleSet(_FrozenConfig):
    """Knobs that differ between the forecast-time and live-check outfits."""
    name: str
    cold_hat: str
    scarf_below_chill: bool
    mild_footwear_floor: UnitThreshold


DEFAULT_THRESHOLDS = OutfitThresholds()

# TODO: confirm with product which footwear floor and scarf behavior is intended
# before merging these two rule sets.
FORECAST_RULES = OutfitRuleSet(
    name="forecast",
    cold_hat=BEANIE,
    scarf_below_chill=False,
    mild_footwear_floor=UnitThreshold(imperial=45, metric=7),
)

LIVE_CHECK_RULES = OutfitRuleSet(
    name="live_check",
    cold_hat=WINTER_HAT,
    scarf_below_chill=True,
    mild_footwear_floor=UnitThreshold(imperial=50, metric=10),
)

RULE_SETS = {r.name: r for r in (FORECAST_RULES, LIVE_CHECK_RULES)}

# First match wins; the last band has no floor so every temperature lands somewhere.
_BASE_LAYERS = (
    ("hot", ("Light breathable shirt", "Tank top or t-shirt")),
    ("warm", ("Light jacket", "Long sleeve shirt")),
    ("cool", ("Medium jacket", "Sweater or hoodie")),
    ("cold", ("Heavy coat", "Insulated jacket")),
    (None, ("Winter coat", "Thermal layers")),
)


class _Outfit:
    """Accumulates items in rule order without duplicates."""

    def __init__(self):
        self.outerwear: List[str] = []
        self.shoes: List[str] = []
        self.accessories: List[str] = []

    @staticmethod
    def _add(items: List[str], *names: str) -> None:
        for name in names:
            if name not in items:
                items.append(name)

    def wear(self, *names: str) -> None:
        self._add(self.outerwear, *names)

    def shoe(self, *names: str) -> None:
        self._add(self.shoes, *names)

    def carry(self, *names: str) -> None:
        self._add(self.accessories, *names)

    def build(self) -> OutfitRecommendation:
        return OutfitRecommendation(
            outerwear=self.outerwear[:MAX_OUTERWEAR],
            shoes=self.shoes[:MAX_SHOES],
            accessories=self.accessories[:MAX_ACCESSORIES],
        )


def coerce_unit_system(unit_system: UnitSystem | str) -> UnitSystem:
    """Accept a UnitSystem or its string value."""
    try:
        return UnitSystem(getattr(unit_system, "value", unit_system))
    except ValueError:
        raise ValidationError(f"Unknown unit system '{unit_system}'") from None


def base_layer(temperature: float, unit_system: UnitSystem,
               thresholds: OutfitThresholds = DEFAULT_THRESHOLDS) -> tuple[str, str]:
    """Return the two outerwear items for the band the temperature falls in."""
    for band, items in _BASE_LAYERS:
        if band is None or temperature >= getattr(thresholds, band).for_units(unit_system):
            return items
    raise AssertionError("base layer bands are exhaustive")  # pragma: no cover


def synthesize_outfit(
    snapshot: WeatherSnapshot | Mapping[str, Any],
    unit_system: UnitSystem | str,
    rules: OutfitRuleSet = FORECAST_RULES,
    thresholds: OutfitThresholds = DEFAULT_THRESHOLDS,
) -> OutfitRecommendation:
    """Pure function: recommend outerwear, shoes and accessories for a snapshot."""
    snap = WeatherSnapshot.coerce(snapshot)
    units = coerce_unit_system(unit_system)

    temp = snap.temperature
    condition = snap.condition
    outfit = _Outfit()

    def t(name: str) -> float:
        return getattr(thresholds, name).for_units(units)

    # 1. base layer by temperature band
    outfit.wear(*base_layer(temp, units, thresholds))

    # 2. precipitation
    if snap.precipitation > thresholds.precipitation_heavy or condition.is_rain:
        outfit.wear("Rain jacket")
        outfit.shoe("Waterproof boots")
        outfit.carry("Umbrella")
    elif snap.precipitation > thresholds.precipitation_light:
        outfit.carry("Light rain jacket (just in case)")

    # 3. snow, additive to whatever came before
    if condition.is_snow:
        outfit.wear("Waterproof winter coat")
        outfit.shoe("Insulated winter boots")
        outfit.carry(WINTER_HAT, GLOVES, SCARF)

    # 4. wind
    if snap.wind_speed > t("windy"):
        outfit.wear("Windbreaker")
        if temp < t("wind_comfort"):
            outfit.carry("Ear warmers or hat")

    # 5. cold accessories
    if temp < t("chill"):
        if WINTER_HAT not in outfit.accessories and BEANIE not in outfit.accessories:
            outfit.carry(rules.cold_hat)
        outfit.carry(GLOVES)
        if rules.scarf_below_chill:
            outfit.carry(SCARF)

    # 6. sun protection
    if temp > t("heat") and condition.is_clear:
        outfit.carry("Sunglasses", "Sun hat", "Sunscreen")

    # 7. default footwear
    if not outfit.shoes:
        if temp > t("hot"):
            outfit.shoe("Comfortable walking shoes", "Breathable sneakers")
        elif temp > rules.mild_footwear_floor.for_units(units):
            outfit.shoe("Walking shoes", "Athletic sneakers")
        else:
            outfit.shoe("Closed-toe shoes", "Warm sneakers or boots")

    # 8. truncation happens in build()
    return outfit.build()
