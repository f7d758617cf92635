# backend/lunchbell/menu/config.py

"""
メニュー取得に必要な設定値をまとめるモジュール。
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lunchbell.utils.config import get_env, get_env_int

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Los_Angeles"


@dataclass(frozen=True)
class MenuSettings:
    """メニュー取得元・更新スケジュールの設定値コンテナ。"""

    url: Optional[str]
    timeout_seconds: int = 10
    refresh_hour: int = 8
    refresh_minute: int = 0
    timezone: str = DEFAULT_TIMEZONE


def _get_env_timezone(name: str, default: str) -> str:
    """
    タイムゾーン名の環境変数を取得する。

    - 未設定の場合は default を返す。
    - 存在しないゾーン名の場合は warning を出して default を返す。
    """
    raw = get_env(name, default=default, required=False)
    try:
        ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone for %s=%r, using default %s", name, raw, default)
        return default
    return raw


@lru_cache()
def get_menu_settings() -> MenuSettings:
    """
    環境変数からメニュー設定を読み込む。

    任意:
      - MENU_URL（未設定の場合、取得は常に失敗扱い）
      - MENU_TIMEOUT_SECONDS（デフォルト 10秒）
      - MENU_REFRESH_HOUR（0〜23、デフォルト 8）
      - MENU_REFRESH_MINUTE（0〜59、デフォルト 0）
      - MENU_REFRESH_TIMEZONE（デフォルト America/Los_Angeles）

    不正な値は warning を出してデフォルトに戻す。
    """
    return MenuSettings(
        url=get_env("MENU_URL", required=False),
        timeout_seconds=get_env_int("MENU_TIMEOUT_SECONDS", default=10, min_value=1),
        refresh_hour=get_env_int("MENU_REFRESH_HOUR", default=8, min_value=0, max_value=23),
        refresh_minute=get_env_int("MENU_REFRESH_MINUTE", default=0, min_value=0, max_value=59),
        timezone=_get_env_timezone("MENU_REFRESH_TIMEZONE", DEFAULT_TIMEZONE),
    )
