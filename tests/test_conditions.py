import pytest

from app.conditions import FALLBACK_CONDITION, classify_weather_code
from app.domain import ConditionLabel


@pytest.mark.parametrize(
    "code, expected",
    [
        (0, ConditionLabel.CLEAR_SKY),
        (1, ConditionLabel.PARTLY_CLOUDY),
        (3, ConditionLabel.PARTLY_CLOUDY),
        (4, ConditionLabel.FOGGY),
        (45, ConditionLabel.FOGGY),
        (48, ConditionLabel.FOGGY),
        (49, ConditionLabel.RAINY),
        (61, ConditionLabel.RAINY),
        (67, ConditionLabel.RAINY),
        (68, ConditionLabel.SNOWY),
        (77, ConditionLabel.SNOWY),
        (78, ConditionLabel.RAIN_SHOWERS),
        (82, ConditionLabel.RAIN_SHOWERS),
        (83, ConditionLabel.SNOW_SHOWERS),
        (86, ConditionLabel.SNOW_SHOWERS),
        (87, ConditionLabel.THUNDERSTORM),
        (99, ConditionLabel.THUNDERSTORM),
    ],
)
def test_bin_edges(code, expected):
    assert classify_weather_code(code) is expected


def test_every_code_in_range_has_a_label():
    labels = [classify_weather_code(code) for code in range(100)]
    assert all(isinstance(label, ConditionLabel) for label in labels)
    # bins ascend, so the label sequence never revisits an earlier bin
    order = list(ConditionLabel)
    positions = [order.index(label) for label in labels]
    assert positions == sorted(positions)


@pytest.mark.parametrize("code", [150, 100, -1, None, "61", True, 2.5, float("nan")])
def test_out_of_range_or_malformed_falls_back(code):
    assert classify_weather_code(code) is FALLBACK_CONDITION
    assert FALLBACK_CONDITION is ConditionLabel.PARTLY_CLOUDY


def test_integral_float_codes_are_accepted():
    assert classify_weather_code(61.0) is ConditionLabel.RAINY


def test_condition_flags():
    assert ConditionLabel.RAIN_SHOWERS.is_rain
    assert not ConditionLabel.THUNDERSTORM.is_rain
    assert ConditionLabel.SNOW_SHOWERS.is_snow
    assert ConditionLabel.CLEAR_SKY.is_clear
    assert not ConditionLabel.PARTLY_CLOUDY.is_clear
    assert ConditionLabel.from_text("  snowy ") is ConditionLabel.SNOWY
