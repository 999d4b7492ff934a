from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Protocol

import aiosqlite
from nonebot import logger


def cache_key(leaderboard_id: str) -> str:
    return f"aoc_data_{leaderboard_id}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class CacheStore(Protocol):
    async def get(self, key: str) -> tuple[Any, float] | None:
        """Return (value, age in seconds) or None on a miss."""
        ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryCacheStore:
    def __init__(self) -> None:
        self._items: dict[str, tuple[int, Any]] = {}

    async def get(self, key: str) -> tuple[Any, float] | None:
        item = self._items.get(key)
        if item is None:
            return None
        stored_at_ms, value = item
        return value, (_now_ms() - stored_at_ms) / 1000

    async def set(self, key: str, value: Any) -> None:
        self._items[key] = (_now_ms(), value)


class SqliteCacheStore:
    """Keeps `{timestamp, data}` entries in one SQLite table.

    `timestamp` is the fetch time in epoch milliseconds, `data` the raw
    leaderboard JSON.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    async def init(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self._db_path) as db:
            await db.executescript(
                """
                CREATE TABLE IF NOT EXISTS leaderboard_cache (
                    key TEXT PRIMARY KEY,
                    fetched_at_ms INTEGER NOT NULL,
                    payload TEXT NOT NULL
                );
                """
            )
            await db.commit()

    async def get(self, key: str) -> tuple[Any, float] | None:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT fetched_at_ms, payload FROM leaderboard_cache WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None

        fetched_at_ms, payload = row
        try:
            entry = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Cache entry {} holds invalid JSON, treating as a miss", key)
            return None
        if not isinstance(entry, dict):
            logger.warning("Cache entry {} is not a JSON object, treating as a miss", key)
            return None
        return entry.get("data"), (_now_ms() - int(fetched_at_ms)) / 1000

    async def set(self, key: str, value: Any) -> None:
        fetched_at_ms = _now_ms()
        payload = json.dumps({"timestamp": fetched_at_ms, "data": value}, ensure_ascii=False)
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                INSERT INTO leaderboard_cache (key, fetched_at_ms, payload)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    fetched_at_ms = excluded.fetched_at_ms,
                    payload = excluded.payload
                """,
                (key, fetched_at_ms, payload),
            )
            await db.commit()
