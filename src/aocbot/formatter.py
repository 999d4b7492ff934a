from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from aocbot.models import LogEntry, RankedMember

SORT_TITLES = {"local": "Local Score", "stars": "Stars"}


def _format_ts(ts: int, tz: ZoneInfo) -> str:
    return datetime.fromtimestamp(ts, UTC).astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")


def format_leaderboard(
    ranked: list[RankedMember],
    event: str,
    sort: str,
    tz: ZoneInfo,
    source_note: str | None = None,
) -> str:
    lines = [f"=== Advent of Code {event} Leaderboard ({SORT_TITLES.get(sort, sort)}) ==="]
    if source_note:
        lines.append(source_note)
    if not ranked:
        lines.append("No members on this leaderboard yet.")
        return "\n".join(lines)

    lines.append("Rank | Score | Stars | Name | Last Star")
    for i, r in enumerate(ranked, start=1):
        last_star = _format_ts(r.last_star_ts, tz) if r.last_star_ts > 0 else "-"
        lines.append(f"{i} | {r.local_score} | {r.stars}* | {r.display_name} | {last_star}")
    return "\n".join(lines)


def format_log(
    entries: list[LogEntry],
    event: str,
    tz: ZoneInfo,
    limit: int | None = None,
    source_note: str | None = None,
) -> str:
    lines = [f"=== Advent of Code {event} Log ==="]
    if source_note:
        lines.append(source_note)
    if not entries:
        lines.append("No stars collected yet.")
        return "\n".join(lines)

    shown = entries if limit is None else entries[:limit]
    lines.append("Time | User | Challenge | Time Since Release")
    for e in shown:
        lines.append(
            f"{_format_ts(e.timestamp, tz)} | {e.member_name} | "
            f"Day {e.day} Part {e.part} | {e.time_since_release}"
        )
    if len(shown) < len(entries):
        lines.append(f"... {len(entries) - len(shown)} older entries omitted")
    return "\n".join(lines)
