from __future__ import annotations

from datetime import datetime, time as dtime, timedelta, tzinfo
from pathlib import Path
import logging

import pandas as pd

from .errors import DataSourceUnavailable
from .events import CalendarEvent
from .utils import normalize_text

logger = logging.getLogger(__name__)

EVENT_COLUMNS = [
    "id",
    "title",
    "description",
    "start_at",
    "end_at",
    "created_at",
]


def _coerce_instants(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, utc=True, errors="coerce", format="ISO8601")


def load_events(path: Path) -> list[CalendarEvent]:
    """Read events from a JSON records file.

    Rows with a missing id, malformed instants or an inverted range are
    dropped; a missing file is an empty calendar.
    """
    if not path.exists():
        return []

    try:
        raw_df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    except (OSError, ValueError) as exc:
        raise DataSourceUnavailable(f"Could not read events file {path.name}: {exc}") from exc

    if raw_df.empty:
        return []

    missing = [column for column in ("id", "start_at", "end_at") if column not in raw_df.columns]
    if missing:
        raise DataSourceUnavailable(f"Events file {path.name} is missing columns: {', '.join(missing)}")

    df = raw_df.copy()
    for column in EVENT_COLUMNS:
        if column not in df.columns:
            df[column] = None

    df["start_at"] = _coerce_instants(df["start_at"])
    df["end_at"] = _coerce_instants(df["end_at"])
    df["created_at"] = _coerce_instants(df["created_at"])

    events: list[CalendarEvent] = []
    seen_ids: set[str] = set()
    for row in df.to_dict("records"):
        event_id = normalize_text(row.get("id"))
        start_at = row.get("start_at")
        end_at = row.get("end_at")

        if not event_id or pd.isna(start_at) or pd.isna(end_at) or start_at >= end_at:
            logger.warning("Dropping malformed event row %r from %s", event_id or "<no id>", path.name)
            continue

        if event_id in seen_ids:
            logger.warning("Dropping duplicate event id %r from %s", event_id, path.name)
            continue
        seen_ids.add(event_id)

        created_at = row.get("created_at")
        events.append(
            CalendarEvent(
                id=event_id,
                title=normalize_text(row.get("title")),
                description=normalize_text(row.get("description")) or None,
                start_at=start_at.to_pydatetime(),
                end_at=end_at.to_pydatetime(),
                created_at=(start_at if pd.isna(created_at) else created_at).to_pydatetime(),
            )
        )

    logger.info("Loaded %d events from %s", len(events), path)
    return events


def save_events(path: Path, events: list[CalendarEvent]) -> None:
    frame = pd.DataFrame(
        [
            {
                "id": event.id,
                "title": event.title,
                "description": event.description,
                "start_at": event.start_at.isoformat(),
                "end_at": event.end_at.isoformat(),
                "created_at": event.created_at.isoformat(),
            }
            for event in events
        ],
        columns=EVENT_COLUMNS,
    )

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_json(tmp_path, orient="records", indent=2, force_ascii=False)
        tmp_path.replace(path)
    except OSError as exc:
        raise DataSourceUnavailable(f"Could not write events file {path.name}: {exc}") from exc


def demo_events(now: datetime, tz: tzinfo) -> list[CalendarEvent]:
    """A few events around ``now`` for an empty calendar."""
    today = now.astimezone(tz).date()
    created_at = datetime.combine(today, dtime(0, 0), tzinfo=tz)

    def at(day_offset: int, hour: int, minute: int = 0) -> datetime:
        return datetime.combine(today + timedelta(days=day_offset), dtime(hour, minute), tzinfo=tz)

    specs = [
        ("demo-1", "Doctor appointment", "Routine check-up", at(0, 9), at(0, 10)),
        ("demo-2", "Team meeting", "Weekly planning", at(0, 14), at(0, 15, 30)),
        ("demo-3", "Gym", "Strength training", at(1, 7), at(1, 8)),
        ("demo-4", "Dentist", "Cleaning and review", at(2, 10), at(2, 11)),
        ("demo-5", "Coffee with client", "Project presentation", at(3, 15), at(3, 16, 30)),
    ]
    return [
        CalendarEvent(
            id=event_id,
            title=title,
            description=description,
            start_at=start_at,
            end_at=end_at,
            created_at=created_at,
        )
        for event_id, title, description, start_at, end_at in specs
    ]
