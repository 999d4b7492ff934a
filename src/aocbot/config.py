from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AOCBOT_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    enabled_groups: Annotated[list[str], NoDecode] = Field(default_factory=list)
    db_path: Path = Path("data/aocbot.sqlite3")
    chart_dir: Path = Path("data/charts")
    leaderboard_id: str = "4598107"
    event: str = "2025"
    session_cookie: str | None = None
    base_url: str = "https://adventofcode.com"
    cache_ttl_minutes: int = Field(default=15, ge=0)
    request_timeout_seconds: float = 10.0
    log_limit: int = Field(default=20, ge=1)
    display_timezone: str = "America/New_York"
    font_path: str | None = None

    @field_validator("enabled_groups", mode="before")
    @classmethod
    def _parse_groups(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, int):
            return [str(value)]
        if isinstance(value, str):
            chunks = [p.strip() for p in value.split(",") if p.strip()]
            return chunks
        if isinstance(value, list):
            return [str(v).strip() for v in value if str(v).strip()]
        raise ValueError("AOCBOT_ENABLED_GROUPS must be comma separated string or list")

    @field_validator("event")
    @classmethod
    def _check_event(cls, value: str) -> str:
        value = value.strip()
        if not (len(value) == 4 and value.isdigit()):
            raise ValueError("AOCBOT_EVENT must be a 4-digit year")
        return value


settings = Settings()
