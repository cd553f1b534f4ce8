from __future__ import annotations


class CalendarError(Exception):
    """Base class for errors surfaced by the calendar backend."""


class InvalidEventInput(CalendarError):
    """Raised when an event draft cannot be applied to the store."""


class EventNotFound(CalendarError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class DataSourceUnavailable(CalendarError):
    """Raised when the events file cannot be read or written."""
