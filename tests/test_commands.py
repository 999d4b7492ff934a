from aocbot.commands import extract_plain_text, parse_bot_command


def test_parse_leaderboard_commands() -> None:
    assert parse_bot_command("/lb") == ("lb", "run")
    assert parse_bot_command("/lb local") == ("lb", "run")
    assert parse_bot_command("/LB Stars") == ("lb", "stars")
    assert parse_bot_command("lb chart") == ("lb", "chart")
    assert parse_bot_command("/lb help") == ("lb", "help")


def test_parse_log_and_help() -> None:
    assert parse_bot_command("/log") == ("log", "run")
    assert parse_bot_command("/log help") == ("log", "help")
    assert parse_bot_command("/h") == ("h", "run")


def test_parse_full_width_and_invisible() -> None:
    assert parse_bot_command("／ｌｂ　ｓｔａｒｓ") == ("lb", "stars")
    assert parse_bot_command("/lb\u200b") == ("lb", "run")


def test_parse_rejects_unknown() -> None:
    assert parse_bot_command("/log stars") is None
    assert parse_bot_command("/h help") is None
    assert parse_bot_command("/rank") is None
    assert parse_bot_command("hello /lb") is None


def test_extract_plain_text() -> None:
    message = [
        {"type": "at", "data": {"qq": "1"}},
        {"type": "text", "data": {"text": " /lb "}},
        {"type": "text", "data": {"text": "stars"}},
    ]
    assert extract_plain_text(message) == "/lb stars"
    assert extract_plain_text("  /log ") == "/log"
    assert extract_plain_text(None) == ""
