import os
import unittest

from app.config import Settings


class TestConfig(unittest.TestCase):
    def test_settings_defaults(self):
        previous = os.environ.pop("WALK_FORECAST_DAYS", None)
        try:
            s = Settings()
            self.assertEqual(s.forecast_days, 16)
            self.assertEqual(s.user_agent, "SunsetWalkPlanner/1.0")
            self.assertEqual(s.city_result_limit, 5)
            self.assertEqual(s.max_city_name_chars, 100)
            self.assertEqual(s.lookup_cache_seconds, 86400)
            self.assertEqual(s.default_timezone, "UTC")
        finally:
            if previous is not None:
                os.environ["WALK_FORECAST_DAYS"] = previous

    def test_settings_env_override(self):
        previous = os.environ.get("WALK_OPEN_METEO_URL")
        try:
            os.environ["WALK_OPEN_METEO_URL"] = "http://example.com/v1/forecast/"
            s = Settings()
            self.assertEqual(s.open_meteo_url, "http://example.com/v1/forecast")
        finally:
            if previous is None:
                os.environ.pop("WALK_OPEN_METEO_URL", None)
            else:
                os.environ["WALK_OPEN_METEO_URL"] = previous

    def test_timeout_override(self):
        previous = os.environ.get("WALK_HTTP_TIMEOUT_SECONDS")
        try:
            os.environ["WALK_HTTP_TIMEOUT_SECONDS"] = "2.5"
            s = Settings()
            self.assertEqual(s.http_timeout_seconds, 2.5)
        finally:
            if previous is None:
                os.environ.pop("WALK_HTTP_TIMEOUT_SECONDS", None)
            else:
                os.environ["WALK_HTTP_TIMEOUT_SECONDS"] = previous


if __name__ == "__main__":
    unittest.main()
