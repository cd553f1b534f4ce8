from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .errors import InvalidEventInput
from .utils import normalize_text, parse_instant

MAX_EVENT_DURATION = timedelta(hours=24)


@dataclass(frozen=True)
class EventDraft:
    title: str
    start_at: datetime
    end_at: datetime
    description: str | None = None


@dataclass(frozen=True)
class CalendarEvent:
    id: str
    title: str
    start_at: datetime
    end_at: datetime
    created_at: datetime
    description: str | None = None

    def to_draft(self) -> EventDraft:
        return EventDraft(
            title=self.title,
            start_at=self.start_at,
            end_at=self.end_at,
            description=self.description,
        )


def build_draft(
    *,
    title: Any = "",
    description: Any = None,
    start_at: Any,
    end_at: Any,
) -> EventDraft:
    """Validate raw draft values, raising ``InvalidEventInput`` on the first problem."""
    start = parse_instant(start_at)
    end = parse_instant(end_at)

    if start is None:
        raise InvalidEventInput("Invalid event start date.")
    if end is None:
        raise InvalidEventInput("Invalid event end date.")
    if start >= end:
        raise InvalidEventInput("Event end must be after its start.")
    if end - start > MAX_EVENT_DURATION:
        raise InvalidEventInput("Event is too long (24 hours at most).")

    return EventDraft(
        title=normalize_text(title),
        start_at=start,
        end_at=end,
        description=normalize_text(description) or None,
    )


def validate_draft(draft: EventDraft) -> EventDraft:
    return build_draft(
        title=draft.title,
        description=draft.description,
        start_at=draft.start_at,
        end_at=draft.end_at,
    )
