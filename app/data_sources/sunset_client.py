"""Sunset times from the sunrise-sunset.org API."""
from __future__ import annotations

import datetime as dt

from app.config import settings
from app.data_sources.http_session import session
from app.errors import UpstreamUnavailable, malformed_payload
from utils.logging_utils import coarse_location, get_tagged_logger

logger = get_tagged_logger(__name__, tag="sunset_client")

SERVICE_NAME = "sunrise-sunset"


def fetch_sunset(latitude: float, longitude: float, date: dt.date) -> dt.datetime:
    """Return the sunset instant (UTC, timezone-aware) for a date and location."""
    params = {
        "lat": latitude,
        "lng": longitude,
        "date": date.isoformat(),
        "formatted": 0,
    }
    logger.info("Fetching sunset", extra={"location": coarse_location(latitude, longitude), "date": date.isoformat()})
    resp = session.get(settings.sunset_url, params=params, timeout=settings.http_timeout_seconds)
    resp.raise_for_status()
    data = resp.json()

    with malformed_payload(SERVICE_NAME):
        status = data.get("status")
    if status != "OK":
        raise UpstreamUnavailable(SERVICE_NAME, f"unexpected status '{status}'")

    with malformed_payload(SERVICE_NAME):
        sunset = dt.datetime.fromisoformat(data["results"]["sunset"])
    if sunset.tzinfo is None:
        sunset = sunset.replace(tzinfo=dt.timezone.utc)
    return sunset.astimezone(dt.timezone.utc)
