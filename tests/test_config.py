import pytest
from pydantic import ValidationError

from aocbot.config import Settings


def test_read_settings_from_env_file(tmp_path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "AOCBOT_ENABLED_GROUPS=1084141833,747378973\n"
        "AOCBOT_LEADERBOARD_ID=123\n"
        "AOCBOT_EVENT=2024\n",
        encoding="utf-8",
    )

    settings = Settings(_env_file=env_path)
    assert settings.enabled_groups == ["1084141833", "747378973"]
    assert settings.leaderboard_id == "123"
    assert settings.event == "2024"
    assert settings.cache_ttl_minutes == 15


def test_event_must_be_a_year(tmp_path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("AOCBOT_EVENT=twenty\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        Settings(_env_file=env_path)
