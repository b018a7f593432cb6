from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

ONE_MINUTE = timedelta(minutes=1)


def local_zone(tz: str) -> ZoneInfo:
    return ZoneInfo(tz)


def parse_iso(ts: str | datetime | None, tz: str) -> datetime | None:
    """Parse an ISO-8601 timestamp (or pass a datetime through) as an aware datetime.

    Naive values are taken to be local time in ``tz``. Returns None if ts is falsy.
    Raises ValueError on malformed text.
    """
    if not ts:
        return None
    if isinstance(ts, datetime):
        dt = ts
    else:
        dt = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=local_zone(tz))
    return dt


def to_utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc)


def compute_duration(start: datetime, end: datetime) -> int:
    """Whole minutes between start and end, floor-divided. Never negative."""
    return max((end - start) // ONE_MINUTE, 0)


@dataclass(frozen=True)
class Window:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _local_midnight(day: date, zone: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def day_window(now: datetime, tz: str) -> Window:
    zone = local_zone(tz)
    today = now.astimezone(zone).date()
    return Window(
        to_utc(_local_midnight(today, zone)),
        to_utc(_local_midnight(today + timedelta(days=1), zone)),
    )


def week_window(now: datetime, tz: str, week_start: int = 0) -> Window:
    """Week containing ``now``; ``week_start`` uses ``date.weekday()`` numbering (0 = Monday)."""
    zone = local_zone(tz)
    today = now.astimezone(zone).date()
    first = today - timedelta(days=(today.weekday() - week_start) % 7)
    return Window(
        to_utc(_local_midnight(first, zone)),
        to_utc(_local_midnight(first + timedelta(days=7), zone)),
    )


def month_window(now: datetime, tz: str) -> Window:
    zone = local_zone(tz)
    today = now.astimezone(zone).date()
    first = today.replace(day=1)
    following = (first + timedelta(days=32)).replace(day=1)
    return Window(
        to_utc(_local_midnight(first, zone)),
        to_utc(_local_midnight(following, zone)),
    )
