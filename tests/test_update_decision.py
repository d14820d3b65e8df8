import unittest

from app.domain import GranularFactors, Severity, UnitSystem, WeatherSnapshot
from app.errors import ValidationError
from app.update_decision import compare_and_decide, decide_update, generate_message


def _snap(temperature, condition="Partly cloudy", precipitation=10, wind_speed=5):
    return WeatherSnapshot(
        temperature=temperature,
        condition=condition,
        precipitation=precipitation,
        wind_speed=wind_speed,
    )


def _factors(feels_like, humidity=50):
    return GranularFactors(wind_chill=feels_like, humidity=humidity, uv_index=0, feels_like=feels_like)


class TestDecideUpdate(unittest.TestCase):
    def test_no_significant_change(self):
        decision = decide_update(_snap(60), _snap(63))
        self.assertFalse(decision.should_update)
        self.assertEqual(decision.reasons, [])
        self.assertIsNone(decision.severity)

    def test_temperature_reason_is_moderate(self):
        decision = decide_update(_snap(60), _snap(68))
        self.assertTrue(decision.should_update)
        self.assertEqual(decision.reasons, ["Temperature changed by 8°F"])
        self.assertIs(decision.severity, Severity.MODERATE)

    def test_one_reason_per_tripped_threshold(self):
        decision = decide_update(
            _snap(60, precipitation=10, wind_speed=5),
            _snap(54, precipitation=35, wind_speed=20),
        )
        self.assertEqual(
            decision.reasons,
            [
                "Temperature changed by 6°F",
                "Wind speed changed by 15 mph",
                "Precipitation probability changed by 25%",
            ],
        )
        self.assertIs(decision.severity, Severity.HIGH)

    def test_metric_reasons_use_metric_units(self):
        decision = decide_update(_snap(10, wind_speed=5), _snap(17, wind_speed=12), UnitSystem.METRIC)
        self.assertEqual(decision.reasons, ["Temperature changed by 7°C", "Wind speed changed by 7 km/h"])

    def test_large_precipitation_jump_is_high(self):
        decision = decide_update(_snap(60, precipitation=0), _snap(60, precipitation=45))
        self.assertIs(decision.severity, Severity.HIGH)


class TestGenerateMessage(unittest.TestCase):
    def _message(self, forecast, current, factors, units=UnitSystem.IMPERIAL):
        result = compare_and_decide(forecast, current, units, factors=factors)
        return result.message

    def test_summary_only_without_factors(self):
        message = self._message(_snap(60), _snap(68), None)
        self.assertEqual(message, "Temperature is 8° warmer than predicted (68° vs 60°).")

    def test_feels_like_when_cold_and_different(self):
        message = self._message(_snap(32), _snap(30), _factors(24))
        self.assertEqual(
            message,
            "Temperature is close to forecast (30°). Feels like 24°F (colder than actual temperature).",
        )

    def test_no_feels_like_when_gap_small(self):
        message = self._message(_snap(32), _snap(30), _factors(28))
        self.assertNotIn("Feels like", message)

    def test_no_feels_like_at_cold_floor(self):
        message = self._message(_snap(40), _snap(40), _factors(30))
        self.assertNotIn("Feels like", message)

    def test_metric_feels_like_uses_fahrenheit_gate(self):
        # 3°C is 37.4°F, below the 40°F floor
        message = self._message(_snap(3), _snap(3), _factors(-1), UnitSystem.METRIC)
        self.assertIn("Feels like -1°C (colder than actual temperature).", message)

    def test_humidity_when_hot(self):
        very_muggy = self._message(_snap(80), _snap(80), _factors(84, humidity=85))
        self.assertIn("Humidity is 85% (very muggy - will feel hotter).", very_muggy)

        humid = self._message(_snap(80), _snap(80), _factors(82, humidity=75))
        self.assertIn("Humidity is 75% (humid - will feel hotter).", humid)

    def test_no_humidity_when_not_hot(self):
        message = self._message(_snap(70), _snap(70), _factors(70, humidity=90))
        self.assertNotIn("Humidity", message)

    def test_metric_humidity_uses_fahrenheit_gate(self):
        # 24°C is 75.2°F, at or above the 75°F floor
        hot = self._message(_snap(24), _snap(24), _factors(27, humidity=85), UnitSystem.METRIC)
        self.assertIn("Humidity is 85% (very muggy - will feel hotter).", hot)

        # 23°C is 73.4°F
        mild = self._message(_snap(23), _snap(23), _factors(25, humidity=85), UnitSystem.METRIC)
        self.assertNotIn("Humidity", mild)

    def test_generate_message_directly(self):
        result = compare_and_decide(_snap(60), _snap(60))
        message = generate_message(result.comparison, _factors(60), _snap(60))
        self.assertEqual(message, "Temperature is close to forecast (60°).")


def test_compare_and_decide_bundles_everything():
    result = compare_and_decide(
        {"temperature": 60, "condition": "Clear sky", "precipitation": 0, "wind_speed": 5},
        {"temperature": 68, "condition": "Clear sky", "precipitation": 0, "wind_speed": 5},
    )
    assert result.comparison.temperature.significant
    assert result.decision.should_update
    assert result.message.startswith("Temperature is 8° warmer")


class TestNonFiniteInput(unittest.TestCase):
    def test_nan_and_infinity_are_rejected(self):
        for bad in (float("nan"), float("inf"), float("-inf")):
            live = {"temperature": bad, "condition": "Clear sky", "precipitation": 0, "wind_speed": 5}
            with self.subTest(value=bad), self.assertRaises(ValidationError):
                compare_and_decide(_snap(60), live)

    def test_overflowing_difference_is_rejected(self):
        with self.assertRaises(ValidationError):
            decide_update(_snap(-1.7e308), _snap(1.7e308))
        with self.assertRaises(ValidationError):
            compare_and_decide(_snap(-1.7e308), _snap(1.7e308))
