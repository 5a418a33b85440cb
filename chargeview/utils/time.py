"""Time helpers shared by the reporting services."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

_TIME_FORMAT = "%H:%M"
_DATE_TIME_FORMAT = "%Y-%m-%d at %H:%M"


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """
    Return ``value`` as an aware UTC datetime.

    Drivers without time zone support (SQLite) hand back naive datetimes for
    ``DateTime(timezone=True)`` columns; these are stored as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_today(now: datetime | None = None) -> date:
    return as_utc(now or utc_now()).date()


def humanize(value: datetime | None, *, now: datetime | None = None, tz: str = "UTC") -> str:
    """
    Render a timestamp for display next to its raw value.

    Args:
        value: Instant to render, ``None`` renders as an empty string
        now: Reference instant used to decide between today/yesterday/tomorrow
        tz: IANA zone the calendar comparison and clock time are expressed in

    Returns:
        ``"Today at 14:05"``, ``"Yesterday at 09:30"``, ``"Tomorrow at 00:15"``
        or ``"2024-03-01 at 18:45"`` for anything further away.
    """
    if value is None:
        return ""

    zone = ZoneInfo(tz)
    local_value = as_utc(value).astimezone(zone)
    local_today = as_utc(now or utc_now()).astimezone(zone).date()

    day_offset = (local_value.date() - local_today).days
    if day_offset == 0:
        return f"Today at {local_value.strftime(_TIME_FORMAT)}"
    if day_offset == -1:
        return f"Yesterday at {local_value.strftime(_TIME_FORMAT)}"
    if day_offset == 1:
        return f"Tomorrow at {local_value.strftime(_TIME_FORMAT)}"
    return local_value.strftime(_DATE_TIME_FORMAT)


def days_before(day: date, days: int) -> date:
    return day - timedelta(days=days)
