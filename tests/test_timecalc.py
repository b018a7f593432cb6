import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.services.timecalc import (
    compute_duration,
    day_window,
    month_window,
    parse_iso,
    to_utc,
    week_window,
)

CHICAGO = "America/Chicago"


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "seconds, minutes",
    [(0, 0), (59, 0), (60, 1), (95, 1), (3599, 59), (3600, 60)],
)
def test_compute_duration_floors_to_whole_minutes(seconds, minutes):
    start = utc(2024, 5, 15, 9, 0)
    assert compute_duration(start, start + timedelta(seconds=seconds)) == minutes


def test_compute_duration_never_negative():
    start = utc(2024, 5, 15, 9, 0)
    assert compute_duration(start, start - timedelta(minutes=5)) == 0


def test_parse_iso_localizes_naive_values():
    parsed = parse_iso("2024-05-15T09:00:00", CHICAGO)
    # Chicago is UTC-5 in May (daylight time).
    assert to_utc(parsed) == utc(2024, 5, 15, 14, 0)


def test_parse_iso_keeps_explicit_offsets():
    assert to_utc(parse_iso("2024-05-15T09:00:00Z", CHICAGO)) == utc(2024, 5, 15, 9, 0)
    assert to_utc(parse_iso("2024-05-15T09:00:00+02:00", CHICAGO)) == utc(2024, 5, 15, 7, 0)


def test_parse_iso_handles_empty_and_malformed_input():
    assert parse_iso(None, CHICAGO) is None
    assert parse_iso("", CHICAGO) is None
    with pytest.raises(ValueError):
        parse_iso("not-a-date", CHICAGO)


def test_day_window_uses_local_midnight():
    # 03:00 UTC on the 16th is still the evening of the 15th in Chicago.
    window = day_window(utc(2024, 5, 16, 3, 0), CHICAGO)
    assert window.start == utc(2024, 5, 15, 5, 0)
    assert window.end == utc(2024, 5, 16, 5, 0)
    assert window.contains(utc(2024, 5, 15, 5, 0))
    assert not window.contains(window.end)


def test_week_window_starts_on_configured_day():
    wednesday = utc(2024, 5, 15, 18, 0)

    monday_week = week_window(wednesday, CHICAGO, week_start=0)
    assert monday_week.start == utc(2024, 5, 13, 5, 0)
    assert monday_week.end == utc(2024, 5, 20, 5, 0)

    sunday_week = week_window(wednesday, CHICAGO, week_start=6)
    assert sunday_week.start == utc(2024, 5, 12, 5, 0)
    assert sunday_week.end == utc(2024, 5, 19, 5, 0)


def test_week_window_on_the_start_day_itself():
    monday = utc(2024, 5, 13, 12, 0)
    window = week_window(monday, CHICAGO, week_start=0)
    assert window.start == utc(2024, 5, 13, 5, 0)


def test_month_window_crosses_year_end():
    window = month_window(utc(2024, 12, 20, 12, 0), CHICAGO)
    # Chicago is UTC-6 in winter.
    assert window.start == utc(2024, 12, 1, 6, 0)
    assert window.end == utc(2025, 1, 1, 6, 0)
