from __future__ import annotations

from datetime import date, datetime, time as dtime, timedelta, timezone, tzinfo
from typing import Any

import pandas as pd

MINUTES_PER_DAY = 24 * 60

EVENT_COLORS = (
    ("bg-sky-400", "rgba(56, 189, 248, 0.4)"),
    ("bg-blue-600", "rgba(37, 99, 235, 0.4)"),
    ("bg-indigo-500", "rgba(99, 102, 241, 0.4)"),
    ("bg-violet-500", "rgba(139, 92, 246, 0.4)"),
    ("bg-emerald-500", "rgba(16, 185, 129, 0.4)"),
)


def parse_instant(value: Any) -> datetime | None:
    """Coerce ``value`` into a timezone-aware datetime, or ``None`` when malformed.

    Naive datetimes are rejected: an instant without an offset cannot be placed
    on a timeline shared with other instants.
    """
    if value is None or value is pd.NaT:
        return None

    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()

    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            return None
        return value

    if not isinstance(value, str):
        return None

    raw = value.strip()
    if not raw:
        return None

    try:
        parsed = pd.to_datetime(raw, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(parsed):
        return None

    return parse_instant(parsed)


def normalize_text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def minutes_since_start_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def minutes_until_end_of_day(value: datetime) -> int:
    return MINUTES_PER_DAY - minutes_since_start_of_day(value)


def minutes_diff(later: datetime, earlier: datetime) -> int:
    """Elapsed minutes; same-zone subtraction would otherwise ignore DST shifts."""
    elapsed = later.astimezone(timezone.utc) - earlier.astimezone(timezone.utc)
    return round(elapsed.total_seconds() / 60)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def day_key(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def local_date(instant: datetime, tz: tzinfo) -> date:
    return instant.astimezone(tz).date()


def day_key_to_date(key: str) -> date | None:
    parts = (key or "").strip().split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError:
        return None


def day_key_to_local_start(key: str, tz: tzinfo) -> datetime | None:
    day = day_key_to_date(key)
    return datetime.combine(day, dtime(0, 0), tzinfo=tz) if day else None


def day_window(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Half-open window covering one calendar day in ``tz``."""
    start = datetime.combine(day, dtime(0, 0), tzinfo=tz)
    return start, start + timedelta(days=1)


def week_start_for(anchor: date, week_start_day: int) -> date:
    """First day of the week containing ``anchor``; ``week_start_day`` uses Monday=0."""
    return anchor - timedelta(days=(anchor.weekday() - week_start_day) % 7)


def month_grid_days(anchor: date, week_start_day: int) -> list[date]:
    """Whole weeks covering the month of ``anchor``."""
    month_start = anchor.replace(day=1)
    next_month = (month_start + timedelta(days=32)).replace(day=1)
    month_end = next_month - timedelta(days=1)

    grid_start = week_start_for(month_start, week_start_day)
    grid_end = week_start_for(month_end, week_start_day) + timedelta(days=6)
    return [grid_start + timedelta(days=offset) for offset in range((grid_end - grid_start).days + 1)]


def event_color_index(event_id: str, size: int = len(EVENT_COLORS)) -> int:
    return sum(ord(char) for char in event_id or "") % size


def event_color_class(event_id: str) -> str:
    return EVENT_COLORS[event_color_index(event_id)][0]


def event_color_background(event_id: str) -> str:
    return EVENT_COLORS[event_color_index(event_id)][1]
