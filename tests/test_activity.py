from datetime import UTC, datetime

import pytest

from aocbot.activity import build_activity_log, format_duration, release_instant
from aocbot.models import Member, Snapshot, Star

# 2025-12-01 05:00:00 UTC
DAY1_RELEASE = 1764565200


def _snapshot(*members: Member, event: str = "2025") -> Snapshot:
    return Snapshot(owner_id=1, event=event, members={m.id: m for m in members})


def test_format_duration() -> None:
    assert format_duration(3661000) == "01:01:01"
    assert format_duration(0) == "00:00:00"
    assert format_duration(999) == "00:00:00"
    assert format_duration(30 * 3600 * 1000) == "30:00:00"


def test_format_negative_duration() -> None:
    assert format_duration(-5000) == "-00:00:05"


def test_release_instant() -> None:
    assert release_instant(2025, 1) == datetime(2025, 12, 1, 5, tzinfo=UTC)
    assert int(release_instant(2025, 1).timestamp()) == DAY1_RELEASE


def test_star_at_release_is_zero() -> None:
    member = Member(
        id=1,
        name="A",
        stars=1,
        local_score=0,
        last_star_ts=DAY1_RELEASE,
        completion_day_level={1: {1: Star(DAY1_RELEASE, 0)}},
    )
    logs = build_activity_log(_snapshot(member))
    assert len(logs) == 1
    assert logs[0].time_since_release == "00:00:00"
    assert (logs[0].day, logs[0].part) == (1, 1)


def test_log_sorted_newest_first_and_names() -> None:
    day2 = DAY1_RELEASE + 86400
    a = Member(
        id=1,
        name="A",
        stars=2,
        local_score=0,
        last_star_ts=day2 + 60,
        completion_day_level={
            1: {1: Star(DAY1_RELEASE + 3661, 0)},
            2: {1: Star(day2 + 60, 0)},
        },
    )
    b = Member(
        id=42,
        name=None,
        stars=1,
        local_score=0,
        last_star_ts=DAY1_RELEASE + 7200,
        completion_day_level={1: {2: Star(DAY1_RELEASE + 7200, 0)}},
    )
    logs = build_activity_log(_snapshot(a, b))

    timestamps = [e.timestamp for e in logs]
    assert timestamps == sorted(timestamps, reverse=True)
    assert [(e.member_id, e.day, e.part) for e in logs] == [(1, 2, 1), (42, 1, 2), (1, 1, 1)]
    assert logs[0].time_since_release == "00:01:00"
    assert logs[1].member_name == "(anonymous user #42)"
    assert logs[2].time_since_release == "01:01:01"


def test_empty_log() -> None:
    assert build_activity_log(_snapshot()) == []


def test_bad_event_or_day_raises() -> None:
    member = Member(
        id=1,
        name="A",
        stars=1,
        local_score=0,
        last_star_ts=DAY1_RELEASE,
        completion_day_level={1: {1: Star(DAY1_RELEASE, 0)}},
    )
    with pytest.raises(ValueError):
        build_activity_log(_snapshot(member, event="twenty"))

    member = Member(
        id=1,
        name="A",
        stars=1,
        local_score=0,
        last_star_ts=DAY1_RELEASE,
        completion_day_level={32: {1: Star(DAY1_RELEASE, 0)}},
    )
    with pytest.raises(ValueError):
        build_activity_log(_snapshot(member))
