from __future__ import annotations

from collections import defaultdict

from aocbot.models import Member, RankedMember, Snapshot


def _members_by_id(snapshot: Snapshot) -> list[Member]:
    return sorted(snapshot.members.values(), key=lambda m: m.id)


def calculate_local_score(snapshot: Snapshot) -> list[RankedMember]:
    members = _members_by_id(snapshot)
    member_count = len(members)
    points: dict[int, int] = {m.id: 0 for m in members}

    # (day, part) -> [(ts, member_id), ...]
    by_challenge: dict[tuple[int, int], list[tuple[int, int]]] = defaultdict(list)
    for member in members:
        for day, parts in member.completion_day_level.items():
            for part, star in parts.items():
                by_challenge[(day, part)].append((star.get_star_ts, member.id))

    # Speed ranking: first finisher gets N points, the next N-1, and so on.
    # Equal timestamps fall back to member id.
    for finishers in by_challenge.values():
        finishers.sort()
        for index, (_, member_id) in enumerate(finishers):
            points[member_id] += member_count - index

    ranked = [RankedMember.from_member(m, points[m.id]) for m in members]
    ranked.sort(key=lambda r: (-r.local_score, r.id))
    return ranked


def calculate_star_score(snapshot: Snapshot) -> list[RankedMember]:
    ranked = [
        RankedMember.from_member(m, m.local_score) for m in _members_by_id(snapshot)
    ]
    ranked.sort(key=lambda r: (-r.stars, r.last_star_ts, r.id))
    return ranked
