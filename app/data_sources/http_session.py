"""Shared HTTP session for the upstream clients.

Geocoding and sunset lookups are cached; weather URLs never are, so a live
check always reflects the provider's latest reading. There is no retry layer:
a failed call surfaces once to the caller.
"""
from __future__ import annotations

from urllib.parse import urlparse

import requests_cache
from requests_cache import DO_NOT_CACHE

from app.config import Settings, settings as default_settings
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="http_session")


def _host_path(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.netloc}{parsed.path}"


def build_session(settings: Settings | None = None) -> requests_cache.CachedSession:
    """Create a cached session with per-URL expiry and a fixed User-Agent."""
    settings = settings or default_settings
    urls_expire_after = {
        _host_path(settings.nominatim_url): settings.lookup_cache_seconds,
        _host_path(settings.sunset_url): settings.lookup_cache_seconds,
        "*": DO_NOT_CACHE,
    }
    cached = requests_cache.CachedSession(
        settings.http_cache_name,
        urls_expire_after=urls_expire_after,
    )
    cached.headers.update({"User-Agent": settings.user_agent})
    logger.info("Using requests_cache session", extra={"cached_urls": sorted(urls_expire_after)})
    return cached


session = build_session()
