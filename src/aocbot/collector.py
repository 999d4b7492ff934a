from __future__ import annotations

from typing import Any

import httpx


class FetchError(RuntimeError):
    pass


def leaderboard_url(base_url: str, event: str, leaderboard_id: str) -> str:
    return f"{base_url.rstrip('/')}/{event}/leaderboard/private/view/{leaderboard_id}.json"


async def fetch_leaderboard(
    client: httpx.AsyncClient, url: str, session_cookie: str | None = None
) -> Any:
    headers = {"Cookie": f"session={session_cookie}"} if session_cookie else None
    try:
        response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        raise FetchError(f"request to {url} failed: {exc}") from exc

    if not response.is_success:
        raise FetchError(f"HTTP error! status: {response.status_code}")
    try:
        return response.json()
    except ValueError as exc:
        raise FetchError(f"response from {url} is not JSON") from exc
