from datetime import datetime, timezone

import pytest

from calendar_layout.config import Settings
from calendar_layout.events import CalendarEvent

UTC = timezone.utc


def at(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, day, hour, minute, tzinfo=UTC)


def make_event(event_id: str, start_at, end_at, title: str = "") -> CalendarEvent:
    return CalendarEvent(
        id=event_id,
        title=title or event_id,
        start_at=start_at,
        end_at=end_at,
        created_at=datetime(2025, 3, 1, tzinfo=UTC),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        data_file=None,
        timezone="UTC",
        week_start_day=6,
        max_events_per_cell=2,
        seed_demo_events=False,
        allowed_origins=["http://localhost:3000"],
        log_level="INFO",
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 12, 11, 30, tzinfo=UTC)
