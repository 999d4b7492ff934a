from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import httpx
from nonebot import logger

from aocbot.activity import build_activity_log
from aocbot.cache import CacheStore, cache_key
from aocbot.collector import FetchError, fetch_leaderboard, leaderboard_url
from aocbot.formatter import format_leaderboard, format_log
from aocbot.models import RankedMember, Snapshot
from aocbot.parser import SnapshotFormatError, parse_snapshot
from aocbot.plotter import render_leaderboard_chart
from aocbot.ranker import calculate_local_score, calculate_star_score

EXAMPLE_DATA_PATH = Path(__file__).parent / "data" / "example.json"

SORT_METHODS: dict[str, Callable[[Snapshot], list[RankedMember]]] = {
    "local": calculate_local_score,
    "stars": calculate_star_score,
}


def load_example_data() -> Any:
    return json.loads(EXAMPLE_DATA_PATH.read_text(encoding="utf-8"))


@dataclass(slots=True)
class LoadResult:
    snapshot: Snapshot
    source: str
    error: str | None = None

    @property
    def note(self) -> str | None:
        if self.source == "example":
            return f"Live data unavailable ({self.error}); showing example data."
        return None


@dataclass(slots=True)
class ChartResult:
    text: str
    image: Path | None


class LeaderboardService:
    def __init__(
        self,
        cache: CacheStore,
        leaderboard_id: str,
        event: str,
        base_url: str,
        session_cookie: str | None,
        cache_ttl_minutes: int = 15,
        request_timeout_seconds: float = 10.0,
        display_timezone: str = "America/New_York",
        chart_dir: Path = Path("data/charts"),
        font_path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        example_loader: Callable[[], Any] = load_example_data,
    ) -> None:
        self.cache = cache
        self.leaderboard_id = leaderboard_id
        self.event = event
        self.url = leaderboard_url(base_url, event, leaderboard_id)
        self.session_cookie = session_cookie
        self.cache_ttl_seconds = cache_ttl_minutes * 60
        self.request_timeout_seconds = request_timeout_seconds
        self.tz = ZoneInfo(display_timezone)
        self.chart_dir = chart_dir
        self.font_path = font_path
        self._transport = transport
        self._example_loader = example_loader

    async def _load_cached(self, key: str) -> Snapshot | None:
        hit = await self.cache.get(key)
        if hit is None:
            logger.info("Leaderboard cache miss for {}", key)
            return None
        data, age = hit
        if age >= self.cache_ttl_seconds:
            logger.info("Leaderboard cache for {} expired ({:.0f}s old)", key, age)
            return None
        try:
            snapshot = parse_snapshot(data)
        except SnapshotFormatError:
            logger.exception("Cached leaderboard for {} is unreadable, refetching", key)
            return None
        logger.info("Using cached leaderboard for {} ({:.0f}s old)", key, age)
        return snapshot

    async def _fetch(self) -> Any:
        async with httpx.AsyncClient(
            timeout=self.request_timeout_seconds, transport=self._transport
        ) as client:
            return await fetch_leaderboard(client, self.url, self.session_cookie)

    async def load(self) -> LoadResult:
        key = cache_key(self.leaderboard_id)
        cached = await self._load_cached(key)
        if cached is not None:
            return LoadResult(cached, "cache")

        logger.info("Fetching fresh leaderboard from {}", self.url)
        try:
            data = await self._fetch()
            snapshot = parse_snapshot(data)
        except (FetchError, SnapshotFormatError) as exc:
            logger.warning("Leaderboard fetch failed: {}; falling back to example data", exc)
            return LoadResult(parse_snapshot(self._example_loader()), "example", str(exc))

        await self.cache.set(key, data)
        return LoadResult(snapshot, "remote")

    async def ranking(self, sort: str = "local") -> tuple[LoadResult, list[RankedMember]]:
        if sort not in SORT_METHODS:
            raise ValueError(f"unknown sort method: {sort}")
        loaded = await self.load()
        return loaded, SORT_METHODS[sort](loaded.snapshot)

    async def leaderboard_text(self, sort: str = "local") -> str:
        loaded, ranked = await self.ranking(sort)
        return format_leaderboard(
            ranked, loaded.snapshot.event, sort, self.tz, source_note=loaded.note
        )

    async def log_text(self, limit: int | None = None) -> str:
        loaded = await self.load()
        entries = build_activity_log(loaded.snapshot)
        return format_log(
            entries, loaded.snapshot.event, self.tz, limit=limit, source_note=loaded.note
        )

    async def chart(self, sort: str = "local") -> ChartResult:
        loaded, ranked = await self.ranking(sort)
        generated_at = datetime.now(UTC)
        stamp = generated_at.strftime("%Y%m%d_%H%M%S")
        image = render_leaderboard_chart(
            output_path=self.chart_dir / self.leaderboard_id / f"leaderboard_{sort}_{stamp}.png",
            ranked=ranked,
            event=loaded.snapshot.event,
            sort=sort,
            generated_at=generated_at,
            tz=self.tz,
            font_path=self.font_path,
        )
        text = format_leaderboard(
            ranked[:3], loaded.snapshot.event, sort, self.tz, source_note=loaded.note
        )
        return ChartResult(text, image)
