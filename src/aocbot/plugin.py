from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from time import monotonic
from zoneinfo import ZoneInfo

from nonebot import get_driver, logger, on, on_message
from nonebot.adapters.onebot.v11 import Bot, Event, GroupMessageEvent, MessageSegment
from nonebot.exception import ActionFailed
from nonebot.plugin import require

from aocbot.cache import SqliteCacheStore
from aocbot.commands import (
    ALL_HELP_TEXT,
    LB_HELP_TEXT,
    LOG_HELP_TEXT,
    extract_plain_text,
    parse_bot_command,
)
from aocbot.config import settings
from aocbot.service import LeaderboardService

require("nonebot_plugin_apscheduler")
from nonebot_plugin_apscheduler import scheduler


driver = get_driver()
cache = SqliteCacheStore(settings.db_path)
service = LeaderboardService(
    cache=cache,
    leaderboard_id=settings.leaderboard_id,
    event=settings.event,
    base_url=settings.base_url,
    session_cookie=settings.session_cookie,
    cache_ttl_minutes=settings.cache_ttl_minutes,
    request_timeout_seconds=settings.request_timeout_seconds,
    display_timezone=settings.display_timezone,
    chart_dir=settings.chart_dir,
    font_path=settings.font_path,
)

_locks: dict[int, asyncio.Lock] = {}
_last_manual_trigger_at: dict[int, float] = {}
MANUAL_TRIGGER_COOLDOWN_SECONDS = 8.0
RELEASE_TZ = ZoneInfo("America/New_York")


def _get_lock(group_id: int) -> asyncio.Lock:
    if group_id not in _locks:
        _locks[group_id] = asyncio.Lock()
    return _locks[group_id]


def _image_segment_from_file(path: Path) -> MessageSegment:
    raw = path.read_bytes()
    b64 = base64.b64encode(raw).decode("ascii")
    return MessageSegment.image(f"base64://{b64}")


def _is_group_allowed(group_id: int) -> bool:
    return str(group_id) in set(settings.enabled_groups)


async def _send_leaderboard(bot: Bot, group_id: int, action: str) -> bool:
    lock = _get_lock(group_id)
    async with lock:
        logger.info("Start leaderboard {} for group {}", action, group_id)
        text = None
        image = None
        for attempt in range(3):
            try:
                if action == "chart":
                    result = await service.chart("local")
                    text, image = result.text, result.image
                elif action == "log":
                    text = await service.log_text(limit=settings.log_limit)
                else:
                    text = await service.leaderboard_text("stars" if action == "stars" else "local")
                break
            except Exception:
                logger.exception(
                    "Group {} leaderboard {} attempt {} failed",
                    group_id,
                    action,
                    attempt + 1,
                )

        if text is None:
            logger.error("Group {} leaderboard {} failed after retries", group_id, action)
            return False

        try:
            await bot.send_group_msg(group_id=group_id, message=text)
        except ActionFailed as exc:
            logger.warning("Group {} leaderboard send failed: {}", group_id, exc)
            return False

        if image:
            try:
                await bot.send_group_msg(
                    group_id=group_id,
                    message=_image_segment_from_file(image.resolve()),
                )
            except ActionFailed as exc:
                logger.warning("Group {} chart image send failed: {}", group_id, exc)

        return True


leaderboard_msg = on_message(priority=10, block=True)
leaderboard_sent_msg = on("message_sent", priority=10, block=False)


@driver.on_startup
async def _on_startup() -> None:
    await cache.init()
    logger.info("aocbot cache initialized at {}", settings.db_path)
    logger.info("aocbot leaderboard {} event {}", settings.leaderboard_id, settings.event)
    logger.info("aocbot enabled groups: {}", settings.enabled_groups)

    # Shortly after each puzzle unlock and once in the evening, December only.
    @scheduler.scheduled_job(
        "cron",
        month="12",
        day="1-25",
        hour="1,20",
        minute="0",
        timezone=RELEASE_TZ,
        id="aocbot_leaderboard",
    )
    async def _scheduled_leaderboard() -> None:
        if not settings.enabled_groups:
            return
        bots = list(get_driver().bots.values())
        if not bots:
            logger.warning("No active bot found for scheduled leaderboard")
            return
        bot = bots[0]
        for group_id_raw in settings.enabled_groups:
            try:
                group_id = int(group_id_raw)
            except ValueError:
                logger.warning("Skip invalid group id in AOCBOT_ENABLED_GROUPS: {}", group_id_raw)
                continue
            await _send_leaderboard(bot, group_id, "run")


async def _send_text(bot: Bot, group_id: int, text: str, matcher=None) -> None:
    if matcher is not None:
        await matcher.finish(text)
    await bot.send_group_msg(group_id=group_id, message=text)


async def _run_with_cooldown(bot: Bot, group_id: int, action: str, matcher) -> None:
    now = monotonic()
    last = _last_manual_trigger_at.get(group_id, 0.0)
    if now - last < MANUAL_TRIGGER_COOLDOWN_SECONDS:
        await matcher.finish("Too many requests, try again in a few seconds.")

    _last_manual_trigger_at[group_id] = now
    ok = await _send_leaderboard(bot, group_id, action)
    if not ok:
        await matcher.finish("Leaderboard update failed, see the bot log for details.")


async def _handle_command(
    bot: Bot,
    group_id: int,
    command: str,
    action: str,
    matcher=None,
) -> None:
    if command == "h":
        await _send_text(bot, group_id, ALL_HELP_TEXT, matcher=matcher)
        return

    if command == "lb":
        if action == "help":
            await _send_text(bot, group_id, LB_HELP_TEXT, matcher=matcher)
            return
        await _run_with_cooldown(bot, group_id, action, matcher)
        return

    if command == "log":
        if action == "help":
            await _send_text(bot, group_id, LOG_HELP_TEXT, matcher=matcher)
            return
        await _run_with_cooldown(bot, group_id, "log", matcher)
        return


@leaderboard_msg.handle()
async def _handle_leaderboard(bot: Bot, event: GroupMessageEvent) -> None:
    allowed = _is_group_allowed(event.group_id)
    if not allowed:
        return

    parsed = parse_bot_command(event.get_plaintext())
    if parsed is None:
        return
    command, action = parsed

    logger.info(
        "Received command {} {} from user {} in group {}",
        command,
        action,
        event.user_id,
        event.group_id,
    )
    await _handle_command(
        bot=bot,
        group_id=event.group_id,
        command=command,
        action=action,
        matcher=leaderboard_msg,
    )


@leaderboard_sent_msg.handle()
async def _handle_leaderboard_self_sent(bot: Bot, event: Event) -> None:
    payload = event.model_dump()
    if payload.get("message_type") != "group":
        return
    group_id = payload.get("group_id")
    if not isinstance(group_id, int):
        return
    if not _is_group_allowed(group_id):
        logger.info("Whitelist check(self_sent): group_id={} allowed=False", group_id)
        return

    raw_text = str(payload.get("raw_message") or "").strip()
    if not raw_text:
        raw_text = extract_plain_text(payload.get("message"))

    parsed = parse_bot_command(raw_text)
    if parsed is None:
        return
    command, action = parsed

    logger.info("Received self-sent command {} {} in group {}", command, action, group_id)
    await _handle_command(
        bot=bot,
        group_id=group_id,
        command=command,
        action=action,
        matcher=leaderboard_sent_msg,
    )
