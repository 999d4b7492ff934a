from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from aocbot.models import Member, Snapshot, Star


class SnapshotFormatError(ValueError):
    pass


def _parse_star(raw: Mapping[str, Any]) -> Star:
    return Star(get_star_ts=int(raw["get_star_ts"]), star_index=int(raw.get("star_index", 0)))


def _parse_member(raw: Mapping[str, Any]) -> Member:
    completion: dict[int, dict[int, Star]] = {}
    for day_key, parts in (raw.get("completion_day_level") or {}).items():
        completion[int(day_key)] = {
            int(part_key): _parse_star(star) for part_key, star in parts.items()
        }

    name = raw.get("name")
    return Member(
        id=int(raw["id"]),
        name=str(name) if name else None,
        stars=int(raw.get("stars") or 0),
        local_score=int(raw.get("local_score") or 0),
        last_star_ts=int(raw.get("last_star_ts") or 0),
        completion_day_level=completion,
    )


def parse_snapshot(raw: Any) -> Snapshot:
    """Reinterpret a leaderboard JSON document as a Snapshot.

    Only the shape is checked: day/part ranges, star counts and timestamps
    are taken as they come. Anything that cannot be read as the expected
    nesting raises SnapshotFormatError.
    """
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError("leaderboard document must be a JSON object")

    try:
        members = {}
        for member_raw in (raw.get("members") or {}).values():
            member = _parse_member(member_raw)
            members[member.id] = member
        return Snapshot(
            owner_id=int(raw.get("owner_id") or 0),
            event=str(raw.get("event") or ""),
            members=members,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SnapshotFormatError(f"malformed leaderboard document: {exc!r}") from exc
