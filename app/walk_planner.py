"""Walk timing: start at sunset minus the walk's duration."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.domain import WalkPlan
from app.errors import ValidationError

ALREADY_LATE = "You should have already started!"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def walk_duration_minutes(hours: int | None, minutes: int | None) -> int:
    """Total walk length; at least one of hours/minutes is required."""
    if hours is None and minutes is None:
        raise ValidationError("Walk duration requires hours or minutes")
    total = (hours or 0) * 60 + (minutes or 0)
    if (hours or 0) < 0 or (minutes or 0) < 0:
        raise ValidationError("Walk duration cannot be negative")
    return total


def resolve_zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Invalid timezone: {tz_name}") from None


def resolve_walk_date(value: str | date, tz_name: str, now: datetime | None = None) -> date:
    """Turn 'today' (in the location's zone) or an ISO date into a date."""
    if isinstance(value, date):
        return value
    if value == "today":
        now = now or datetime.now(timezone.utc)
        return now.astimezone(resolve_zone(tz_name)).date()
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date '{value}'; expected YYYY-MM-DD or 'today'") from None


def format_clock(moment: datetime, tz: ZoneInfo) -> str:
    """Local 12-hour clock time, e.g. '7:05 PM'."""
    return moment.astimezone(tz).strftime("%I:%M %p").lstrip("0")


def describe_time_until(delta: timedelta) -> str:
    """Human phrasing for how long until the walk should start."""
    if delta < timedelta(0):
        return ALREADY_LATE

    total_minutes = int(delta.total_seconds() // 60)
    hours_until, minutes_until = divmod(total_minutes, 60)
    days_until = hours_until // 24

    if days_until > 0:
        return f"{_plural(days_until, 'day')} and {_plural(hours_until % 24, 'hour')}"
    if hours_until > 0:
        return f"{_plural(hours_until, 'hour')} and {_plural(minutes_until, 'minute')}"
    return _plural(minutes_until, "minute")


def minutes_in_dark(sunset_utc: datetime, duration_minutes: int, now: datetime) -> int:
    """How much of a walk started now would happen after sunset."""
    until_sunset = sunset_utc - now
    if until_sunset.total_seconds() <= 0:
        return duration_minutes
    minutes_until_sunset = int(until_sunset.total_seconds() // 60)
    return max(0, duration_minutes - minutes_until_sunset)


def plan_walk(
    sunset_utc: datetime,
    duration_minutes: int,
    tz_name: str,
    *,
    walk_date: date,
    city: str | None = None,
    now: datetime | None = None,
) -> WalkPlan:
    """
    Pure function: compute start time, countdown text and darkness overlap.

    The "should have left by" time and minutes-in-dark only apply when the
    computed start is already in the past.
    """
    if sunset_utc.tzinfo is None:
        raise ValidationError("sunset_utc must be timezone-aware")
    if duration_minutes < 0:
        raise ValidationError("Walk duration cannot be negative")

    tz = resolve_zone(tz_name)
    now = now or datetime.now(timezone.utc)
    start_utc = sunset_utc - timedelta(minutes=duration_minutes)
    until_start = start_utc - now

    should_have_left_by = None
    dark_minutes = 0
    if until_start < timedelta(0) and duration_minutes > 0:
        should_have_left_by = format_clock(start_utc, tz)
        dark_minutes = minutes_in_dark(sunset_utc, duration_minutes, now)

    return WalkPlan(
        city=city,
        date=walk_date,
        timezone=tz_name,
        timezone_abbreviation=sunset_utc.astimezone(tz).tzname() or tz_name,
        sunset_utc=sunset_utc,
        start_utc=start_utc,
        sunset_time=format_clock(sunset_utc, tz),
        start_time=format_clock(start_utc, tz),
        walk_duration_minutes=duration_minutes,
        time_until_walk=describe_time_until(until_start),
        minutes_walking_in_dark=dark_minutes if dark_minutes > 0 else None,
        should_have_left_by=should_have_left_by,
    )
