from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable
import logging

from .config import Settings
from .data_loader import demo_events, load_events
from .events import CalendarEvent, build_draft
from .layout import PositionedSegment, layout_day, scroll_anchor_minute
from .models import (
    DaySchedule,
    EventDraftIn,
    EventOut,
    HealthResponse,
    MonthDay,
    MonthSummary,
    PositionedEvent,
    WeekSchedule,
)
from .store import EventStore
from .utils import (
    day_key,
    day_window,
    event_color_background,
    event_color_class,
    minutes_diff,
    month_grid_days,
    week_start_for,
)

logger = logging.getLogger(__name__)


class CalendarService:
    def __init__(
        self,
        settings: Settings,
        store: EventStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._tz = settings.tzinfo
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._store = store if store is not None else self._build_store()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> EventStore:
        return self._store

    def _build_store(self) -> EventStore:
        path = self._settings.data_file
        events = load_events(path) if path is not None else []
        if not events and self._settings.seed_demo_events:
            logger.info("Seeding demo events")
            events = demo_events(self._clock(), self._tz)
        return EventStore(tz=self._tz, events=events, path=path)

    def _today(self) -> date:
        return self._clock().astimezone(self._tz).date()

    def health(self) -> HealthResponse:
        data_file = self._settings.data_file
        return HealthResponse(
            status="ok",
            timezone=self._settings.timezone,
            records=len(self._store),
            data_file=str(data_file) if data_file is not None else None,
        )

    @staticmethod
    def _serialize_event(event: CalendarEvent) -> EventOut:
        return EventOut(
            id=event.id,
            title=event.title,
            description=event.description,
            start_at=event.start_at,
            end_at=event.end_at,
            created_at=event.created_at,
            color_class=event_color_class(event.id),
            color_background=event_color_background(event.id),
        )

    def list_events(self) -> list[EventOut]:
        return [self._serialize_event(event) for event in self._store.list_events()]

    def get_event(self, event_id: str) -> EventOut:
        return self._serialize_event(self._store.get_event(event_id))

    def create_event(self, payload: EventDraftIn) -> EventOut:
        draft = build_draft(
            title=payload.title,
            description=payload.description,
            start_at=payload.start_at,
            end_at=payload.end_at,
        )
        return self._serialize_event(self._store.add_event(draft))

    def update_event(self, event_id: str, payload: EventDraftIn) -> EventOut:
        current = self._store.get_event(event_id)
        draft = build_draft(
            title=payload.title,
            description=payload.description,
            start_at=payload.start_at,
            end_at=payload.end_at,
        )
        updated = self._store.update_event(
            CalendarEvent(
                id=current.id,
                title=draft.title,
                description=draft.description,
                start_at=draft.start_at,
                end_at=draft.end_at,
                created_at=current.created_at,
            )
        )
        return self._serialize_event(updated)

    def delete_event(self, event_id: str) -> None:
        self._store.remove_event(event_id)

    def _serialize_segment(self, segment: PositionedSegment, window_start: datetime) -> PositionedEvent:
        return PositionedEvent(
            event=self._serialize_event(segment.event),
            start_at=segment.clipped_start.astimezone(self._tz),
            end_at=segment.clipped_end.astimezone(self._tz),
            start_minute=minutes_diff(segment.clipped_start, window_start),
            duration_minutes=segment.duration_minutes,
            col_index=segment.col_index,
            col_count=segment.col_count,
            continues_before=segment.continues_before,
            continues_after=segment.continues_after,
        )

    def _serialize_day(self, day_date: date, events: list[CalendarEvent]) -> DaySchedule:
        window_start, window_end = day_window(day_date, self._tz)
        positioned = layout_day(events, window_start, window_end)

        return DaySchedule(
            date=day_date,
            day_key=day_key(day_date),
            scroll_anchor_minute=scroll_anchor_minute(positioned, window_start, self._clock()),
            events=[self._serialize_segment(segment, window_start) for segment in positioned],
        )

    def get_day_schedule(self, day_date: date, ready: bool = True) -> DaySchedule:
        window_start, window_end = day_window(day_date, self._tz)
        events = self._store.events_overlapping_window(window_start, window_end) if ready else []
        return self._serialize_day(day_date=day_date, events=events)

    def get_week_schedule(self, anchor_date: date, ready: bool = True) -> WeekSchedule:
        week_start = week_start_for(anchor_date, self._settings.week_start_day)
        week_end = week_start + timedelta(days=6)

        events: list[CalendarEvent] = []
        if ready:
            window_start, _ = day_window(week_start, self._tz)
            _, window_end = day_window(week_end, self._tz)
            events = self._store.events_overlapping_window(window_start, window_end)

        days: list[DaySchedule] = []
        for offset in range(7):
            day_date = week_start + timedelta(days=offset)
            days.append(self._serialize_day(day_date=day_date, events=events))

        return WeekSchedule(week_start=week_start, week_end=week_end, days=days)

    def get_month_summary(self, anchor_date: date, ready: bool = True) -> MonthSummary:
        month_start = anchor_date.replace(day=1)
        grid = month_grid_days(anchor_date, self._settings.week_start_day)
        max_per_cell = self._settings.max_events_per_cell
        today = self._today()
        event_days: list[str] = []
        if ready:
            event_days = sorted(self._store.days_with_events_in_month(month_start.year, month_start.month))

        days: list[MonthDay] = []
        for day_date in grid:
            key = day_key(day_date)
            events = self._store.events_starting_on_day(key) if ready else []
            days.append(
                MonthDay(
                    date=day_date,
                    day_key=key,
                    in_month=day_date.month == month_start.month,
                    is_today=ready and day_date == today,
                    event_count=len(events),
                    overflow=max(len(events) - max_per_cell, 0),
                    events=[self._serialize_event(event) for event in events[:max_per_cell]],
                )
            )

        return MonthSummary(
            month_start=month_start,
            grid_start=grid[0],
            grid_end=grid[-1],
            max_events_per_cell=max_per_cell,
            event_days=event_days,
            days=days,
        )
