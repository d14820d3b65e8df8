"""City search against OpenStreetMap Nominatim, with input sanitization."""
from __future__ import annotations

import re
from typing import List

from app.config import settings
from app.data_sources.http_session import session
from app.domain import CityCandidate
from app.errors import ValidationError, malformed_payload
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="nominatim_client")

SERVICE_NAME = "nominatim"

VALID_CITY_PATTERN = re.compile(r"^[a-zA-Z\s\-'.]+$")
SUSPICIOUS_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+=", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
    re.compile(r"eval\(", re.IGNORECASE),
    re.compile(r"expression\(", re.IGNORECASE),
)
PLACE_TYPES = {"city", "administrative"}


def sanitize_city_name(city: str | None, *, max_chars: int | None = None) -> str:
    """Trim and validate a free-text city name, raising ValidationError when unusable."""
    if city is None:
        raise ValidationError("City parameter is required")
    max_chars = max_chars or settings.max_city_name_chars

    cleaned = city.strip()
    if not cleaned:
        raise ValidationError("City name cannot be empty")
    if len(cleaned) > max_chars:
        raise ValidationError("City name is too long")
    if not VALID_CITY_PATTERN.match(cleaned):
        raise ValidationError("City name contains invalid characters")
    if any(p.search(cleaned) for p in SUSPICIOUS_PATTERNS):
        raise ValidationError("Invalid input detected")
    return cleaned


def _to_candidate(item: dict) -> CityCandidate:
    """Split Nominatim's display_name into name / state / country."""
    address_parts = item["display_name"].split(", ")
    return CityCandidate(
        name=item.get("name") or address_parts[0],
        country=address_parts[-1],
        state=address_parts[-2] if len(address_parts) > 2 else None,
        lat=float(item["lat"]),
        lon=float(item["lon"]),
    )


def search_cities(city: str, *, limit: int | None = None) -> List[CityCandidate]:
    """Return zero or more candidate places for a city name."""
    name = sanitize_city_name(city)
    params = {
        "city": name,
        "format": "json",
        "limit": limit or settings.city_result_limit,
    }
    logger.info("Searching cities", extra={"city": name})
    resp = session.get(settings.nominatim_url, params=params, timeout=settings.http_timeout_seconds)
    resp.raise_for_status()
    data = resp.json()

    with malformed_payload(SERVICE_NAME):
        cities = [_to_candidate(item) for item in data if item.get("type") in PLACE_TYPES]
    logger.info("City search complete", extra={"city": name, "matches": len(cities)})
    return cities
