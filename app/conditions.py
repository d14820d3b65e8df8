"""Map WMO weather interpretation codes onto coarse condition labels."""

from __future__ import annotations

from typing import Any

from app.domain import ConditionLabel

# Inclusive upper bound of each ascending bin; code 0 is its own bin.
_CODE_BINS: tuple[tuple[int, ConditionLabel], ...] = (
    (0, ConditionLabel.CLEAR_SKY),
    (3, ConditionLabel.PARTLY_CLOUDY),
    (48, ConditionLabel.FOGGY),
    (67, ConditionLabel.RAINY),
    (77, ConditionLabel.SNOWY),
    (82, ConditionLabel.RAIN_SHOWERS),
    (86, ConditionLabel.SNOW_SHOWERS),
    (99, ConditionLabel.THUNDERSTORM),
)

FALLBACK_CONDITION = ConditionLabel.PARTLY_CLOUDY


def classify_weather_code(code: Any) -> ConditionLabel:
    """
    Return the condition label for a weather code.

    Total over any input: negative, out-of-range, non-integer or missing codes
    fall back to "Partly cloudy".
    """
    if isinstance(code, bool) or not isinstance(code, (int, float)):
        return FALLBACK_CONDITION
    if isinstance(code, float):
        if not code.is_integer():
            return FALLBACK_CONDITION
        code = int(code)
    if code < 0:
        return FALLBACK_CONDITION

    for upper, label in _CODE_BINS:
        if code <= upper:
            return label
    return FALLBACK_CONDITION
