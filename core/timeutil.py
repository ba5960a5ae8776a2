"""Day boundaries, date-input parsing and small numeric helpers."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo


def start_of_day(now: datetime) -> datetime:
    """Local midnight of *now*, in *now*'s timezone."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Return ``(start_of_today, start_of_tomorrow)``."""
    today0 = start_of_day(now)
    tomorrow = today0.date() + timedelta(days=1)
    return today0, datetime.combine(tomorrow, time.min, tzinfo=now.tzinfo)


def today_and_yesterday(now: datetime) -> tuple[date, date]:
    today = now.date()
    return today, today - timedelta(days=1)


def end_of_day(d: date, tz: tzinfo | None) -> datetime:
    return datetime.combine(d, time.max, tzinfo=tz)


def fmt_date_input(dt: datetime | None) -> str:
    """Format a timestamp as ``YYYY-MM-DD`` (empty string for None)."""
    if dt is None:
        return ""
    return dt.date().isoformat()


def parse_date_input(s: str | None, tz: tzinfo | None) -> datetime | None:
    """Parse ``YYYY-MM-DD`` into the end of that calendar day in *tz*.

    Empty or malformed input yields None (no deadline).
    """
    if not s or not s.strip():
        return None
    try:
        d = date.fromisoformat(s.strip())
    except ValueError:
        return None
    return end_of_day(d, tz)


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO timestamp from persisted data; None when absent or malformed.

    Naive timestamps are read as UTC so they compare with aware "now" values.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_day(value: object) -> date | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def progress_pct(value: float, maximum: float) -> float:
    """Percentage of *value* over *maximum*, clamped to 0-100."""
    if maximum <= 0:
        return 0.0
    return clamp(value / maximum * 100, 0, 100)
