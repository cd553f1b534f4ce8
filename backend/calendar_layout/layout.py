from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Iterable
import logging

from .events import CalendarEvent
from .utils import minutes_diff, minutes_since_start_of_day, overlaps, parse_instant

logger = logging.getLogger(__name__)

DEFAULT_SCROLL_MINUTE = 8 * 60


@dataclass(frozen=True)
class Segment:
    event: CalendarEvent
    clipped_start: datetime
    clipped_end: datetime
    continues_before: bool
    continues_after: bool

    @property
    def duration_minutes(self) -> int:
        return minutes_diff(self.clipped_end, self.clipped_start)


@dataclass(frozen=True)
class PositionedSegment(Segment):
    col_index: int
    col_count: int
    cluster_id: int


def segment_events(
    events: Iterable[CalendarEvent],
    window_start: datetime,
    window_end: datetime,
) -> list[Segment]:
    """Clip every event to ``[window_start, window_end)``.

    Events outside the window, events with malformed instants and clips of
    zero width produce no segment. Output order follows the input.
    """
    window_start = parse_instant(window_start)
    window_end = parse_instant(window_end)
    if window_start is None or window_end is None or window_start >= window_end:
        return []

    segments: list[Segment] = []
    for event in events:
        start = parse_instant(event.start_at)
        end = parse_instant(event.end_at)
        if start is None or end is None:
            logger.debug("Skipping event %s with malformed instants", event.id)
            continue

        if not (start < window_end and end > window_start):
            continue

        clipped_start = max(start, window_start)
        clipped_end = min(end, window_end)
        if clipped_start >= clipped_end:
            logger.debug("Skipping degenerate segment of event %s", event.id)
            continue

        segments.append(
            Segment(
                event=event,
                clipped_start=clipped_start,
                clipped_end=clipped_end,
                continues_before=start < window_start,
                continues_after=end > window_end,
            )
        )

    return segments


def _sort_key(segment: Segment) -> tuple[datetime, str]:
    return segment.clipped_start, str(segment.event.id)


def cluster_segments(segments: Iterable[Segment]) -> list[list[Segment]]:
    """Split segments, ordered by start, into runs of chained overlap."""
    items = sorted(
        (segment for segment in segments if segment.clipped_start < segment.clipped_end),
        key=_sort_key,
    )

    clusters: list[list[Segment]] = []
    current: list[Segment] = []
    running_end: datetime | None = None

    for segment in items:
        if current and running_end is not None and segment.clipped_start >= running_end:
            clusters.append(current)
            current = []

        running_end = segment.clipped_end if not current else max(running_end, segment.clipped_end)
        current.append(segment)

    if current:
        clusters.append(current)

    return clusters


def assign_columns(cluster: list[Segment], cluster_id: int = 0) -> list[PositionedSegment]:
    """First-fit column assignment; every member gets the cluster's final column count."""
    columns: list[Segment] = []
    placements: list[tuple[Segment, int]] = []

    for segment in cluster:
        for col, last in enumerate(columns):
            if not overlaps(last.clipped_start, last.clipped_end, segment.clipped_start, segment.clipped_end):
                columns[col] = segment
                placements.append((segment, col))
                break
        else:
            columns.append(segment)
            placements.append((segment, len(columns) - 1))

    col_count = max(1, len(columns))
    return [
        PositionedSegment(
            **{field.name: getattr(segment, field.name) for field in fields(Segment)},
            col_index=col,
            col_count=col_count,
            cluster_id=cluster_id,
        )
        for segment, col in placements
    ]


def pack_segments(segments: Iterable[Segment]) -> list[PositionedSegment]:
    positioned: list[PositionedSegment] = []
    for cluster_id, cluster in enumerate(cluster_segments(segments)):
        positioned.extend(assign_columns(cluster, cluster_id))
    return positioned


def layout_day(
    events: Iterable[CalendarEvent],
    window_start: datetime,
    window_end: datetime,
) -> list[PositionedSegment]:
    return pack_segments(segment_events(events, window_start, window_end))


def scroll_anchor_minute(
    positioned: list[PositionedSegment],
    window_start: datetime,
    now: datetime,
) -> int:
    """Minute of the day the view should initially scroll to."""
    if positioned:
        first = min(positioned, key=_sort_key)
        return minutes_diff(first.clipped_start, window_start)
    if now.astimezone(window_start.tzinfo).date() == window_start.date():
        return minutes_since_start_of_day(now.astimezone(window_start.tzinfo))
    return DEFAULT_SCROLL_MINUTE
