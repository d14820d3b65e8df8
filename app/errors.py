"""Error taxonomy shared by the engine, the upstream clients and the HTTP layer."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator

# What a bad upstream body raises while it is being picked apart.
PAYLOAD_ERRORS = (KeyError, IndexError, TypeError, ValueError, AttributeError)


class WalkPlannerError(Exception):
    """Base error carrying a stable machine-readable code."""
    code = "walk_planner_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        """Structured reason returned to API callers."""
        return {"error": self.code, "detail": self.message}


class ValidationError(WalkPlannerError):
    """Malformed or missing input; raised before any computation happens."""
    code = "validation_error"


class UpstreamUnavailable(WalkPlannerError):
    """An external collaborator failed or answered with a non-success status."""
    code = "upstream_unavailable"

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["service"] = self.service
        return payload


@contextmanager
def malformed_payload(service: str) -> Iterator[None]:
    """
    Wrap the parsing of an upstream response body.

    Missing keys, wrong types and unparseable values inside the block become
    UpstreamUnavailable for `service`; anything else propagates untouched.
    """
    try:
        yield
    except PAYLOAD_ERRORS as exc:
        raise UpstreamUnavailable(service, f"malformed response ({type(exc).__name__}: {exc})") from exc
