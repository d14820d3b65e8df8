import unittest

import pytest

from app.data_sources import nominatim_client
from app.errors import UpstreamUnavailable, ValidationError


class DummyResp:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class DummySession:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params})
        return DummyResp(self.payload)


@pytest.mark.parametrize(
    "raw, message",
    [
        (None, "City parameter is required"),
        ("   ", "City name cannot be empty"),
        ("x" * 101, "City name is too long"),
        ("Paris1", "City name contains invalid characters"),
        ("<script>", "City name contains invalid characters"),
        ("javascript", None),
    ],
)
def test_sanitize_city_name(raw, message):
    if message is None:
        assert nominatim_client.sanitize_city_name(raw) == raw
        return
    with pytest.raises(ValidationError) as excinfo:
        nominatim_client.sanitize_city_name(raw)
    assert excinfo.value.message == message


def test_sanitize_strips_and_keeps_punctuation():
    assert nominatim_client.sanitize_city_name("  St. John's  ") == "St. John's"
    assert nominatim_client.sanitize_city_name("Winston-Salem") == "Winston-Salem"


def test_sanitize_respects_max_chars():
    with pytest.raises(ValidationError):
        nominatim_client.sanitize_city_name("Springfield", max_chars=5)


class TestSearchCities(unittest.TestCase):
    def setUp(self):
        self._orig_session = nominatim_client.session

    def tearDown(self):
        nominatim_client.session = self._orig_session

    def test_filters_and_splits_results(self):
        payload = [
            {
                "name": "Springfield",
                "display_name": "Springfield, Sangamon County, Illinois, United States",
                "lat": "39.7990",
                "lon": "-89.6440",
                "type": "city",
            },
            {
                "display_name": "Springfield, Massachusetts, United States",
                "lat": "42.1015",
                "lon": "-72.5898",
                "type": "administrative",
            },
            {
                "name": "Springfield Mall",
                "display_name": "Springfield Mall, Springfield, Virginia, United States",
                "lat": "38.77",
                "lon": "-77.17",
                "type": "retail",
            },
        ]
        dummy = DummySession(payload)
        nominatim_client.session = dummy

        cities = nominatim_client.search_cities("  Springfield ")

        self.assertEqual(len(cities), 2)
        self.assertEqual(cities[0].name, "Springfield")
        self.assertEqual(cities[0].state, "Illinois")
        self.assertEqual(cities[0].country, "United States")
        self.assertAlmostEqual(cities[0].lat, 39.799)
        self.assertEqual(cities[1].name, "Springfield")
        self.assertEqual(cities[1].state, "Massachusetts")

        params = dummy.calls[0]["params"]
        self.assertEqual(params["city"], "Springfield")
        self.assertEqual(params["format"], "json")

    def test_state_absent_for_short_display_name(self):
        nominatim_client.session = DummySession(
            [{"name": "Monaco", "display_name": "Monaco, Monaco", "lat": "43.73", "lon": "7.42", "type": "city"}]
        )
        cities = nominatim_client.search_cities("Monaco")
        self.assertIsNone(cities[0].state)

    def test_invalid_name_never_hits_network(self):
        dummy = DummySession([])
        nominatim_client.session = dummy
        with self.assertRaises(ValidationError):
            nominatim_client.search_cities("Paris; DROP TABLE")
        self.assertEqual(dummy.calls, [])

    def test_result_without_display_name_is_upstream_failure(self):
        nominatim_client.session = DummySession([{"name": "Paris", "lat": "48.85", "lon": "2.35", "type": "city"}])
        with self.assertRaises(UpstreamUnavailable) as ctx:
            nominatim_client.search_cities("Paris")
        self.assertEqual(ctx.exception.service, "nominatim")

    def test_non_list_body_is_upstream_failure(self):
        nominatim_client.session = DummySession({"error": "rate limited"})
        with self.assertRaises(UpstreamUnavailable):
            nominatim_client.search_cities("Paris")


if __name__ == "__main__":
    unittest.main()
