from __future__ import annotations

from datetime import UTC, datetime

from aocbot.models import LogEntry, Snapshot

# Puzzles unlock at midnight EST (UTC-5); no DST adjustment in December.
RELEASE_HOUR_UTC = 5


def release_instant(year: int, day: int) -> datetime:
    return datetime(year, 12, day, RELEASE_HOUR_UTC, 0, 0, tzinfo=UTC)


def format_duration(ms: int) -> str:
    sign = "-" if ms < 0 else ""
    seconds = abs(ms) // 1000
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{sign}{h:02d}:{m:02d}:{s:02d}"


def _log_name(member_id: int, name: str | None) -> str:
    return name or f"(anonymous user #{member_id})"


def build_activity_log(snapshot: Snapshot) -> list[LogEntry]:
    if not snapshot.members:
        return []

    year = int(snapshot.event)
    logs: list[LogEntry] = []
    for member in sorted(snapshot.members.values(), key=lambda m: m.id):
        for day in sorted(member.completion_day_level):
            released_ms = int(release_instant(year, day).timestamp()) * 1000
            parts = member.completion_day_level[day]
            for part in sorted(parts):
                star = parts[part]
                diff = star.get_star_ts * 1000 - released_ms
                logs.append(
                    LogEntry(
                        timestamp=star.get_star_ts,
                        member_id=member.id,
                        member_name=_log_name(member.id, member.name),
                        day=day,
                        part=part,
                        time_since_release=format_duration(diff),
                    )
                )

    logs.sort(key=lambda e: e.timestamp, reverse=True)
    return logs
