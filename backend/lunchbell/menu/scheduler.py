# backend/lunchbell/menu/scheduler.py

"""
メニュー更新のスケジュール。

平日（月〜金）の指定時刻（デフォルト 8:00 America/Los_Angeles）に MenuGate.refresh() を呼ぶ。
更新ループはアプリの lifespan が asyncio タスクとして所有する。
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .config import MenuSettings
from .service import MenuGate

logger = logging.getLogger(__name__)

WEEKDAYS = range(0, 5)
RETRY_SECONDS = 300.0


def next_refresh_at(
    now: datetime,
    *,
    hour: int = 8,
    minute: int = 0,
    tz: str = "America/Los_Angeles",
) -> datetime:
    """
    now より後の、次の平日 hour:minute（tz のローカル時刻）を返す。

    naive な now は UTC として扱う。
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    zone = ZoneInfo(tz)
    local_now = now.astimezone(zone)
    candidate_date = local_now.date()

    for _ in range(8):
        candidate = datetime(
            candidate_date.year,
            candidate_date.month,
            candidate_date.day,
            hour,
            minute,
            tzinfo=zone,
        )
        if candidate.weekday() in WEEKDAYS and candidate > local_now:
            return candidate
        candidate_date += timedelta(days=1)

    raise RuntimeError("Unable to compute next menu refresh time")


async def run_refresh_schedule(
    gate: MenuGate,
    settings: MenuSettings,
    *,
    retry_seconds: float = RETRY_SECONDS,
) -> None:
    """
    キャンセルされるまで、スケジュール通りに gate.refresh() を呼び続ける。

    1回分の処理で例外が起きてもループは止めず、ログに残して retry_seconds 後にやり直す。
    """
    logger.info("Starting menu refresh schedule...")
    try:
        while True:
            try:
                now = datetime.now(timezone.utc)
                next_run = next_refresh_at(
                    now,
                    hour=settings.refresh_hour,
                    minute=settings.refresh_minute,
                    tz=settings.timezone,
                )
                delay = (next_run - now).total_seconds()
                logger.info("Next menu refresh at %s", next_run.isoformat())
                await asyncio.sleep(max(delay, 0))
                await asyncio.to_thread(gate.refresh)
            except Exception:  # noqa: BLE001 - 更新ループはサービス稼働中ずっと生かしておく
                logger.exception(
                    "Menu refresh schedule iteration failed, retrying in %s seconds", retry_seconds
                )
                await asyncio.sleep(retry_seconds)
    finally:
        logger.info("Stopping menu refresh schedule")
