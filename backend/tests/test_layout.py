from datetime import datetime, timedelta, timezone
import random

from calendar_layout.layout import (
    Segment,
    cluster_segments,
    layout_day,
    pack_segments,
    scroll_anchor_minute,
    segment_events,
)
from conftest import at, make_event

DAY_START = at(10, 0)
DAY_END = at(11, 0)


def _segment(event_id: str, start_min: int, end_min: int) -> Segment:
    start = DAY_START + timedelta(minutes=start_min)
    end = DAY_START + timedelta(minutes=end_min)
    return Segment(
        event=make_event(event_id, start, end),
        clipped_start=start,
        clipped_end=end,
        continues_before=False,
        continues_after=False,
    )


def _columns(positioned) -> dict[str, tuple[int, int]]:
    return {item.event.id: (item.col_index, item.col_count) for item in positioned}


def test_single_event_inside_day() -> None:
    events = [make_event("a", at(10, 9), at(10, 10))]

    positioned = layout_day(events, DAY_START, DAY_END)

    assert len(positioned) == 1
    item = positioned[0]
    assert item.clipped_start == at(10, 9)
    assert item.clipped_end == at(10, 10)
    assert item.continues_before is False
    assert item.continues_after is False
    assert (item.col_index, item.col_count) == (0, 1)
    assert item.duration_minutes == 60


def test_three_mutually_overlapping_events() -> None:
    events = [
        make_event("a", at(10, 9), at(10, 10)),
        make_event("b", at(10, 9, 30), at(10, 10, 30)),
        make_event("c", at(10, 9, 45), at(10, 10, 15)),
    ]

    columns = _columns(layout_day(events, DAY_START, DAY_END))

    assert columns == {"a": (0, 3), "b": (1, 3), "c": (2, 3)}


def test_event_spanning_midnight_is_split_across_days() -> None:
    events = [make_event("late", at(10, 22), at(11, 2))]

    first_day = segment_events(events, DAY_START, DAY_END)
    second_day = segment_events(events, DAY_END, DAY_END + timedelta(days=1))

    assert len(first_day) == 1
    assert first_day[0].clipped_start == at(10, 22)
    assert first_day[0].clipped_end == DAY_END
    assert first_day[0].continues_before is False
    assert first_day[0].continues_after is True

    assert len(second_day) == 1
    assert second_day[0].clipped_start == DAY_END
    assert second_day[0].clipped_end == at(11, 2)
    assert second_day[0].continues_before is True
    assert second_day[0].continues_after is False


def test_back_to_back_events_share_a_column() -> None:
    events = [
        make_event("a", at(10, 9), at(10, 10)),
        make_event("b", at(10, 10), at(10, 11)),
    ]

    columns = _columns(layout_day(events, DAY_START, DAY_END))

    assert columns == {"a": (0, 1), "b": (0, 1)}


def test_events_touching_window_edges_are_excluded() -> None:
    events = [
        make_event("ends-at-start", at(9, 20), DAY_START),
        make_event("starts-at-end", DAY_END, at(11, 3)),
        make_event("before", at(9, 8), at(9, 9)),
    ]

    assert segment_events(events, DAY_START, DAY_END) == []


def test_event_covering_whole_window_is_flagged_both_ways() -> None:
    events = [make_event("long", at(9, 23), at(11, 1))]

    [segment] = segment_events(events, DAY_START, DAY_END)

    assert segment.clipped_start == DAY_START
    assert segment.clipped_end == DAY_END
    assert segment.continues_before is True
    assert segment.continues_after is True


def test_malformed_instants_are_dropped_silently() -> None:
    events = [
        make_event("naive", datetime(2025, 3, 10, 9), datetime(2025, 3, 10, 10)),
        make_event("garbage", "not a date", at(10, 10)),
        make_event("missing", None, at(10, 10)),
        make_event("inverted", at(10, 12), at(10, 11)),
        make_event("ok", "2025-03-10T09:00:00Z", "2025-03-10T10:00:00+00:00"),
    ]

    segments = segment_events(events, DAY_START, DAY_END)

    assert [segment.event.id for segment in segments] == ["ok"]
    assert segments[0].clipped_start == at(10, 9)


def test_invalid_window_produces_nothing() -> None:
    events = [make_event("a", at(10, 9), at(10, 10))]

    assert segment_events(events, DAY_END, DAY_START) == []
    assert segment_events(events, None, DAY_END) == []


def test_clipping_respects_other_offsets() -> None:
    sao_paulo = timezone(timedelta(hours=-3))
    start = datetime(2025, 3, 10, 20, 0, tzinfo=sao_paulo)  # 23:00 UTC
    end = datetime(2025, 3, 10, 23, 0, tzinfo=sao_paulo)  # 02:00 UTC next day

    [segment] = segment_events([make_event("tz", start, end)], DAY_START, DAY_END)

    assert segment.clipped_start == at(10, 23)
    assert segment.clipped_end == DAY_END
    assert segment.continues_after is True


def test_chained_overlap_forms_one_cluster() -> None:
    segments = [_segment("a", 0, 60), _segment("b", 30, 90), _segment("c", 100, 120)]

    clusters = cluster_segments(segments)
    columns = _columns(pack_segments(segments))

    assert [[item.event.id for item in cluster] for cluster in clusters] == [["a", "b"], ["c"]]
    assert columns == {"a": (0, 2), "b": (1, 2), "c": (0, 1)}


def test_chain_reuses_free_column_but_keeps_cluster_width() -> None:
    segments = [_segment("a", 0, 60), _segment("b", 30, 120), _segment("c", 90, 150)]

    positioned = pack_segments(segments)

    assert _columns(positioned) == {"a": (0, 2), "b": (1, 2), "c": (0, 2)}
    assert len({item.cluster_id for item in positioned}) == 1


def test_early_members_are_stamped_with_final_column_count() -> None:
    segments = [
        _segment("a", 0, 240),
        _segment("b", 10, 20),
        _segment("c", 120, 180),
        _segment("d", 130, 170),
    ]

    columns = _columns(pack_segments(segments))

    assert columns["a"] == (0, 3)
    assert columns["b"] == (1, 3)
    assert columns["c"] == (1, 3)
    assert columns["d"] == (2, 3)


def test_pack_is_independent_of_input_order() -> None:
    segments = [
        _segment("a", 0, 60),
        _segment("b", 0, 60),
        _segment("c", 0, 30),
        _segment("d", 30, 90),
        _segment("e", 200, 260),
    ]
    expected = sorted((item.event.id, item.col_index, item.col_count) for item in pack_segments(segments))

    rng = random.Random(7)
    for _ in range(20):
        shuffled = segments[:]
        rng.shuffle(shuffled)
        triples = sorted((item.event.id, item.col_index, item.col_count) for item in pack_segments(shuffled))
        assert triples == expected


def _peak_depth(items) -> int:
    points: list[tuple[datetime, int]] = []
    for item in items:
        points.append((item.clipped_start, 1))
        points.append((item.clipped_end, -1))

    # ends sort before starts at the same instant: touching segments do not overlap
    points.sort()
    current = peak = 0
    for _, delta in points:
        current += delta
        peak = max(peak, current)
    return peak


def test_random_layouts_are_valid_and_minimal() -> None:
    rng = random.Random(2025)
    for _ in range(50):
        segments = []
        for index in range(rng.randint(1, 25)):
            start = rng.randrange(0, 1380, 15)
            segments.append(_segment(f"e{index}", start, start + rng.randrange(15, 180, 15)))

        positioned = pack_segments(segments)
        assert len(positioned) == len(segments)

        for first in positioned:
            assert 0 <= first.col_index < first.col_count
            for second in positioned:
                if first is second or first.col_index != second.col_index:
                    continue
                assert not (
                    first.clipped_start < second.clipped_end and second.clipped_start < first.clipped_end
                )

        clusters: dict[int, list] = {}
        for item in positioned:
            clusters.setdefault(item.cluster_id, []).append(item)
        for members in clusters.values():
            used = {item.col_index for item in members}
            assert len(used) == _peak_depth(members)
            assert {item.col_count for item in members} == {len(used)}


def test_pack_of_nothing_is_empty() -> None:
    assert pack_segments([]) == []
    assert cluster_segments([]) == []


def test_scroll_anchor_prefers_first_event() -> None:
    positioned = layout_day(
        [make_event("b", at(10, 14), at(10, 15)), make_event("a", at(10, 9, 15), at(10, 10))],
        DAY_START,
        DAY_END,
    )

    assert scroll_anchor_minute(positioned, DAY_START, at(12, 16)) == 9 * 60 + 15


def test_scroll_anchor_falls_back_to_now_or_morning() -> None:
    assert scroll_anchor_minute([], DAY_START, at(10, 13, 20)) == 13 * 60 + 20
    assert scroll_anchor_minute([], DAY_START, at(12, 13, 20)) == 8 * 60
