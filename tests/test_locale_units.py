import unittest

import pytest

from app.domain import SpeedUnit, TemperatureUnit, UnitSystem
from app.errors import ValidationError
from app.locale_units import (
    classify_locale,
    classify_unit_system,
    convert,
    format_speed,
    format_temperature,
    resolve_unit_system,
    to_fahrenheit,
)


@pytest.mark.parametrize(
    "country, expected",
    [
        ("Myanmar", UnitSystem.IMPERIAL),
        ("Burma", UnitSystem.IMPERIAL),
        ("Liberia", UnitSystem.IMPERIAL),
        ("United States of America", UnitSystem.IMPERIAL),
        ("usa", UnitSystem.IMPERIAL),
        ("Canada", UnitSystem.METRIC),
        ("Germany", UnitSystem.METRIC),
        ("Japan", UnitSystem.METRIC),
    ],
)
def test_classify_unit_system(country, expected):
    assert classify_unit_system(country) is expected


def test_country_match_is_substring_based():
    # "Australia" contains "us"
    assert classify_unit_system("Australia") is UnitSystem.IMPERIAL


def test_classify_unit_system_rejects_non_string():
    with pytest.raises(ValidationError):
        classify_unit_system(None)


def test_classify_locale_units():
    canada = classify_locale("Canada")
    assert canada.temperature_unit is TemperatureUnit.CELSIUS
    assert canada.speed_unit is SpeedUnit.KMH

    us = classify_locale("United States")
    assert us.unit_system is UnitSystem.IMPERIAL
    assert us.temperature_unit is TemperatureUnit.FAHRENHEIT
    assert us.speed_unit is SpeedUnit.MPH


class TestResolveUnitSystem(unittest.TestCase):
    def test_defaults_to_imperial(self):
        self.assertIs(resolve_unit_system(), UnitSystem.IMPERIAL)

    def test_country_wins_over_temperature_unit(self):
        self.assertIs(resolve_unit_system("Canada", "fahrenheit"), UnitSystem.METRIC)

    def test_temperature_unit_used_without_country(self):
        self.assertIs(resolve_unit_system(temperature_unit="celsius"), UnitSystem.METRIC)
        self.assertIs(resolve_unit_system(temperature_unit="fahrenheit"), UnitSystem.IMPERIAL)

    def test_unknown_temperature_unit(self):
        with self.assertRaises(ValidationError):
            resolve_unit_system(temperature_unit="kelvin")


class TestConvert(unittest.TestCase):
    def test_temperature_both_ways(self):
        self.assertEqual(convert(20, "temperature", "celsius", "fahrenheit"), 68)
        self.assertEqual(convert(68, "temperature", "fahrenheit", "celsius"), 20)
        self.assertEqual(convert(-40, "temperature", TemperatureUnit.CELSIUS, TemperatureUnit.FAHRENHEIT), -40)

    def test_same_unit_is_identity(self):
        self.assertEqual(convert(12.3, "temperature", "celsius", "celsius"), 12.3)
        self.assertEqual(convert(7.5, "speed", "mph", "mph"), 7.5)

    def test_speed_both_ways(self):
        self.assertAlmostEqual(convert(10, "speed", "mph", "kmh"), 16.0934)
        self.assertAlmostEqual(convert(16.0934, "speed", SpeedUnit.KMH, SpeedUnit.MPH), 10.0)

    def test_no_intermediate_rounding(self):
        self.assertAlmostEqual(convert(21, "temperature", "celsius", "fahrenheit"), 69.8)

    def test_rejects_non_numeric(self):
        for bad in (None, "20", True):
            with self.assertRaises(ValidationError):
                convert(bad, "temperature", "celsius", "fahrenheit")

    def test_rejects_unknown_kind_and_units(self):
        with self.assertRaises(ValidationError):
            convert(1, "pressure", "hpa", "inhg")
        with self.assertRaises(ValidationError):
            convert(1, "temperature", "kelvin", "celsius")
        with self.assertRaises(ValidationError):
            convert(1, "speed", "knots", "mph")


def test_to_fahrenheit_respects_unit_system():
    assert to_fahrenheit(0, UnitSystem.METRIC) == 32
    assert to_fahrenheit(50, UnitSystem.IMPERIAL) == 50


def test_dual_unit_formatting():
    assert format_temperature(20, "celsius") == "68°F / 20°C"
    assert format_temperature(32, TemperatureUnit.FAHRENHEIT) == "32°F / 0°C"
    assert format_speed(10, "mph") == "10 mph / 16 km/h"
