from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/Sao_Paulo"
SUNDAY = 6


@dataclass(frozen=True)
class Settings:
    data_file: Path | None
    timezone: str
    week_start_day: int
    max_events_per_cell: int
    seed_demo_events: bool
    allowed_origins: list[str]
    log_level: str

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _parse_origins(raw: str) -> list[str]:
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["http://localhost:3000"]


def _parse_int(raw: str | None, default: int) -> int:
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def _parse_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


def _parse_timezone(raw: str | None) -> str:
    name = (raw or "").strip() or DEFAULT_TIMEZONE
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return DEFAULT_TIMEZONE
    return name


def _parse_log_level(raw: str | None) -> str:
    level = (raw or "INFO").strip().upper()
    return level if isinstance(logging.getLevelName(level), int) else "INFO"


@lru_cache
def get_settings() -> Settings:
    raw_data_file = os.getenv("DATA_FILE", "").strip()
    data_file = Path(raw_data_file).resolve() if raw_data_file else None

    week_start_day = _parse_int(os.getenv("WEEK_START_DAY"), SUNDAY)
    if not 0 <= week_start_day <= 6:
        week_start_day = SUNDAY

    return Settings(
        data_file=data_file,
        timezone=_parse_timezone(os.getenv("TZ")),
        week_start_day=week_start_day,
        max_events_per_cell=max(_parse_int(os.getenv("MAX_EVENTS_PER_CELL"), 4), 1),
        seed_demo_events=_parse_bool(os.getenv("SEED_DEMO_EVENTS")),
        allowed_origins=_parse_origins(os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")),
        log_level=_parse_log_level(os.getenv("LOG_LEVEL")),
    )
