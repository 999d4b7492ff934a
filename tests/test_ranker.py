import dataclasses

import pytest

from aocbot.models import Member, Snapshot, Star
from aocbot.ranker import calculate_local_score, calculate_star_score


def _member(
    member_id: int,
    stars: dict[tuple[int, int], int],
    name: str | None = None,
    star_count: int | None = None,
    last_star_ts: int | None = None,
) -> Member:
    completion: dict[int, dict[int, Star]] = {}
    for (day, part), ts in stars.items():
        completion.setdefault(day, {})[part] = Star(get_star_ts=ts, star_index=0)
    return Member(
        id=member_id,
        name=name,
        stars=len(stars) if star_count is None else star_count,
        local_score=0,
        last_star_ts=max(stars.values(), default=0) if last_star_ts is None else last_star_ts,
        completion_day_level=completion,
    )


def _snapshot(*members: Member) -> Snapshot:
    return Snapshot(owner_id=1, event="2025", members={m.id: m for m in members})


def test_earliest_finisher_gets_member_count_points() -> None:
    a = _member(1, {(1, 1): 100}, name="A")
    b = _member(2, {(1, 1): 50}, name="B")
    ranked = calculate_local_score(_snapshot(a, b))
    assert [(r.id, r.local_score) for r in ranked] == [(2, 2), (1, 1)]


def test_points_use_member_count_not_group_size() -> None:
    a = _member(1, {(1, 1): 10, (1, 2): 20})
    b = _member(2, {(1, 1): 15})
    c = _member(3, {})
    ranked = calculate_local_score(_snapshot(a, b, c))
    scores = {r.id: r.local_score for r in ranked}
    # day 1 part 1: a=3, b=2; day 1 part 2: a=3
    assert scores == {1: 6, 2: 2, 3: 0}


def test_local_score_conservation() -> None:
    members = [
        _member(1, {(1, 1): 10, (1, 2): 40, (2, 1): 100}),
        _member(2, {(1, 1): 20, (2, 1): 90, (2, 2): 95}),
        _member(3, {(1, 1): 5}),
        _member(4, {}),
    ]
    snapshot = _snapshot(*members)
    n = len(members)
    group_sizes = {(1, 1): 3, (1, 2): 1, (2, 1): 2, (2, 2): 1}
    expected = sum(sum(n - i for i in range(k)) for k in group_sizes.values())

    ranked = calculate_local_score(snapshot)
    assert sum(r.local_score for r in ranked) == expected
    scores = [r.local_score for r in ranked]
    assert scores == sorted(scores, reverse=True)


def test_local_score_ties_ordered_by_member_id() -> None:
    a = _member(7, {(1, 1): 10, (1, 2): 30})
    b = _member(3, {(1, 1): 20, (1, 2): 25})
    ranked = calculate_local_score(_snapshot(a, b))
    assert [r.local_score for r in ranked] == [3, 3]
    assert [r.id for r in ranked] == [3, 7]


def test_equal_timestamps_favor_lower_member_id() -> None:
    a = _member(9, {(1, 1): 10})
    b = _member(4, {(1, 1): 10})
    ranked = calculate_local_score(_snapshot(a, b))
    assert [(r.id, r.local_score) for r in ranked] == [(4, 2), (9, 1)]


def test_local_score_does_not_touch_snapshot() -> None:
    a = _member(1, {(1, 1): 10})
    snapshot = _snapshot(a)
    ranked = calculate_local_score(snapshot)
    assert ranked[0].local_score == 1
    assert snapshot.members[1].local_score == 0
    assert not hasattr(ranked[0], "completion_day_level")

    with pytest.raises(dataclasses.FrozenInstanceError):
        ranked[0].local_score = 50
    assert snapshot.members[1].completion_day_level == {1: {1: Star(get_star_ts=10, star_index=0)}}


def test_star_score_tie_break_on_last_star() -> None:
    a = _member(1, {}, star_count=4, last_star_ts=500)
    b = _member(2, {}, star_count=4, last_star_ts=300)
    c = _member(3, {}, star_count=6, last_star_ts=900)
    ranked = calculate_star_score(_snapshot(a, b, c))
    assert [r.id for r in ranked] == [3, 2, 1]


def test_star_score_keeps_source_local_score() -> None:
    a = Member(id=1, name="A", stars=2, local_score=17, last_star_ts=5)
    ranked = calculate_star_score(_snapshot(a))
    assert ranked[0].local_score == 17


def test_empty_snapshot() -> None:
    snapshot = _snapshot()
    assert calculate_local_score(snapshot) == []
    assert calculate_star_score(snapshot) == []
