"""Tests for core/timeutil.py — day boundaries and date input."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from core.timeutil import (
    clamp,
    day_bounds,
    fmt_date_input,
    parse_date_input,
    parse_timestamp,
    progress_pct,
    start_of_day,
    today_and_yesterday,
)

BERLIN = ZoneInfo("Europe/Berlin")


def test_start_of_day_keeps_timezone():
    now = datetime(2026, 3, 5, 18, 42, 7, 123, tzinfo=BERLIN)
    midnight = start_of_day(now)
    assert midnight == datetime(2026, 3, 5, 0, 0, tzinfo=BERLIN)
    assert midnight.tzinfo is BERLIN


def test_day_bounds_span_one_calendar_day():
    now = datetime(2026, 2, 28, 23, 59, tzinfo=ZoneInfo("UTC"))
    today0, tomorrow0 = day_bounds(now)
    assert today0 == datetime(2026, 2, 28, tzinfo=ZoneInfo("UTC"))
    assert tomorrow0 == datetime(2026, 3, 1, tzinfo=ZoneInfo("UTC"))


def test_today_and_yesterday_across_month():
    today, yesterday = today_and_yesterday(datetime(2026, 3, 1, 0, 5, tzinfo=BERLIN))
    assert today == date(2026, 3, 1)
    assert yesterday == date(2026, 2, 28)


def test_parse_date_input_is_end_of_day():
    dt = parse_date_input("2026-02-20", BERLIN)
    assert dt.date() == date(2026, 2, 20)
    assert dt.time() == time.max
    assert dt.tzinfo is BERLIN


def test_parse_date_input_blank_or_malformed():
    assert parse_date_input("", BERLIN) is None
    assert parse_date_input("   ", BERLIN) is None
    assert parse_date_input(None, BERLIN) is None
    assert parse_date_input("2026-13-40", BERLIN) is None
    assert parse_date_input("tomorrow", BERLIN) is None


def test_fmt_date_input():
    assert fmt_date_input(None) == ""
    assert fmt_date_input(datetime(2026, 2, 3, 23, 59, tzinfo=BERLIN)) == "2026-02-03"


def test_parse_timestamp_naive_is_utc():
    dt = parse_timestamp("2026-02-11T10:00:00")
    assert dt.tzinfo is not None
    assert dt.utcoffset().total_seconds() == 0
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(12345) is None


def test_clamp_and_progress():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert progress_pct(50, 200) == 25
    assert progress_pct(10, 0) == 0
    assert progress_pct(300, 100) == 100
