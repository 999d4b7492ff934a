from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Star:
    get_star_ts: int
    star_index: int


@dataclass(frozen=True, slots=True)
class Member:
    id: int
    name: str | None
    stars: int
    local_score: int
    last_star_ts: int
    # day -> part -> Star
    completion_day_level: dict[int, dict[int, Star]] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or f"(anonymous #{self.id})"


@dataclass(frozen=True, slots=True)
class Snapshot:
    owner_id: int
    event: str
    members: dict[int, Member] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RankedMember:
    id: int
    name: str | None
    stars: int
    last_star_ts: int
    local_score: int

    @classmethod
    def from_member(cls, member: Member, local_score: int) -> RankedMember:
        return cls(
            id=member.id,
            name=member.name,
            stars=member.stars,
            last_star_ts=member.last_star_ts,
            local_score=local_score,
        )

    @property
    def display_name(self) -> str:
        return self.name or f"(anonymous #{self.id})"


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: int
    member_id: int
    member_name: str
    day: int
    part: int
    time_since_release: str
