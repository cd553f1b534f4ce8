from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Callable, Iterable
import logging
import threading
import uuid

from .data_loader import save_events
from .errors import EventNotFound
from .events import CalendarEvent, EventDraft, validate_draft
from .utils import day_key, day_key_to_date, local_date

logger = logging.getLogger(__name__)


def _start_key(event: CalendarEvent) -> datetime:
    return event.start_at


class EventStore:
    """Thread-safe list of events, optionally mirrored to a JSON file after each change."""

    def __init__(
        self,
        tz: tzinfo,
        events: Iterable[CalendarEvent] = (),
        path: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._tz = tz
        self._path = path
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._events: list[CalendarEvent] = sorted(events, key=_start_key)

    def __len__(self) -> int:
        return len(self._events)

    @property
    def path(self) -> Path | None:
        return self._path

    def _commit_locked(self, events: list[CalendarEvent]) -> None:
        if self._path is not None:
            save_events(self._path, events)
        self._events = events

    def list_events(self) -> list[CalendarEvent]:
        return list(self._events)

    def get_event(self, event_id: str) -> CalendarEvent:
        for event in self._events:
            if event.id == event_id:
                return event
        raise EventNotFound(event_id)

    def add_event(self, draft: EventDraft) -> CalendarEvent:
        draft = validate_draft(draft)
        event = CalendarEvent(
            id=str(uuid.uuid4()),
            title=draft.title,
            description=draft.description,
            start_at=draft.start_at,
            end_at=draft.end_at,
            created_at=self._clock(),
        )

        with self._lock:
            self._commit_locked(sorted([*self._events, event], key=_start_key))

        logger.info("Added event %s", event.id)
        return event

    def update_event(self, event: CalendarEvent) -> CalendarEvent:
        draft = validate_draft(event.to_draft())
        with self._lock:
            current = next((item for item in self._events if item.id == event.id), None)
            if current is None:
                raise EventNotFound(event.id)

            updated = CalendarEvent(
                id=current.id,
                title=draft.title,
                description=draft.description,
                start_at=draft.start_at,
                end_at=draft.end_at,
                created_at=current.created_at,
            )
            events = sorted(
                (updated if item.id == event.id else item for item in self._events),
                key=_start_key,
            )
            self._commit_locked(events)

        logger.info("Updated event %s", event.id)
        return updated

    def remove_event(self, event_id: str) -> None:
        with self._lock:
            remaining = [event for event in self._events if event.id != event_id]
            if len(remaining) == len(self._events):
                raise EventNotFound(event_id)
            self._commit_locked(remaining)

        logger.info("Removed event %s", event_id)

    def clear(self) -> None:
        with self._lock:
            self._commit_locked([])

    def events_overlapping_window(self, window_start: datetime, window_end: datetime) -> list[CalendarEvent]:
        return [
            event
            for event in self._events
            if event.start_at < window_end and event.end_at > window_start
        ]

    def events_starting_on_day(self, key: str) -> list[CalendarEvent]:
        day = day_key_to_date(key)
        if day is None:
            return []
        return [event for event in self._events if local_date(event.start_at, self._tz) == day]

    def days_with_events_in_month(self, year: int, month: int) -> set[str]:
        days: set[str] = set()
        for event in self._events:
            start = local_date(event.start_at, self._tz)
            if start.year == year and start.month == month:
                days.add(day_key(start))
        return days
