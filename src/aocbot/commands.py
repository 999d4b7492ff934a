from __future__ import annotations

import re
import unicodedata

COMMAND_RE = re.compile(r"^/?\s*(lb|log|h)(?:\s+(help|stars|local|chart))?\s*$")

LB_HELP_TEXT = (
    "Usage: `/lb`, `/lb stars` or `/lb chart`\n"
    "`/lb`: local score ranking. For every puzzle part the first finisher gets N points "
    "(N = member count), the second N-1, and so on.\n"
    "`/lb stars`: ranking by star count; ties go to whoever got their last star earlier.\n"
    "`/lb chart`: local score ranking as an image."
)

LOG_HELP_TEXT = (
    "Usage: `/log`\n"
    "Shows the most recent stars, newest first, with the time since the puzzle "
    "unlocked (midnight EST)."
)

ALL_HELP_TEXT = (
    "Commands:\n"
    "`/h`: this help\n"
    "`/lb`: leaderboard by local score\n"
    "`/lb stars`: leaderboard by stars\n"
    "`/lb chart`: leaderboard chart\n"
    "`/lb help`: leaderboard rules\n"
    "`/log`: recent star log\n"
    "`/log help`: log rules"
)

# action tokens each command accepts besides "run"
_ALLOWED_ACTIONS = {
    "lb": {"help", "stars", "local", "chart"},
    "log": {"help"},
    "h": set(),
}


def normalize_text(raw_text: str) -> str:
    normalized = unicodedata.normalize("NFKC", raw_text)
    return (
        normalized.replace("\u200b", "")
        .replace("\u200c", "")
        .replace("\u200d", "")
        .replace("\ufeff", "")
        .strip()
        .lower()
    )


def parse_bot_command(raw_text: str) -> tuple[str, str] | None:
    m = COMMAND_RE.match(normalize_text(raw_text))
    if not m:
        return None
    command = m.group(1)
    action_token = m.group(2)
    if action_token and action_token not in _ALLOWED_ACTIONS[command]:
        return None
    if action_token == "local":
        action_token = None
    return command, action_token or "run"


def extract_plain_text(message: object) -> str:
    if isinstance(message, str):
        return message.strip()
    if isinstance(message, list):
        parts: list[str] = []
        for seg in message:
            if not isinstance(seg, dict):
                continue
            if seg.get("type") != "text":
                continue
            data = seg.get("data")
            if isinstance(data, dict):
                text = data.get("text")
                if isinstance(text, str):
                    parts.append(text)
        return "".join(parts).strip()
    return ""
