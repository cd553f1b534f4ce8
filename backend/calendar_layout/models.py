from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class EventDraftIn(BaseModel):
    title: str = ""
    description: str | None = None
    start_at: datetime
    end_at: datetime


class EventOut(BaseModel):
    id: str
    title: str
    description: str | None = None
    start_at: datetime
    end_at: datetime
    created_at: datetime
    color_class: str
    color_background: str


class PositionedEvent(BaseModel):
    event: EventOut
    start_at: datetime
    end_at: datetime
    start_minute: int
    duration_minutes: int
    col_index: int
    col_count: int
    continues_before: bool
    continues_after: bool


class DaySchedule(BaseModel):
    date: date
    day_key: str
    scroll_anchor_minute: int
    events: list[PositionedEvent] = Field(default_factory=list)


class WeekSchedule(BaseModel):
    week_start: date
    week_end: date
    days: list[DaySchedule] = Field(default_factory=list)


class MonthDay(BaseModel):
    date: date
    day_key: str
    in_month: bool
    is_today: bool
    event_count: int
    overflow: int
    events: list[EventOut] = Field(default_factory=list)


class MonthSummary(BaseModel):
    month_start: date
    grid_start: date
    grid_end: date
    max_events_per_cell: int
    event_days: list[str] = Field(default_factory=list)
    days: list[MonthDay] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    timezone: str
    records: int
    data_file: str | None = None


class ErrorResponse(BaseModel):
    detail: str
    request_id: str | None = None
