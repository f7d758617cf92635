# backend/lunchbell/notifications/config.py

"""
通知プロバイダ（Twilio Notify / Slack）の設定値をまとめるモジュール。

どちらも未設定の場合は None を返し、factory 側でログ出力のみの実装に切り替える。
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from lunchbell.utils.config import get_env, get_env_int


@dataclass(frozen=True)
class TwilioNotifySettings:
    """Twilio Notify API 用の設定値コンテナ。"""

    account_sid: str
    auth_token: str
    service_sid: str
    base_url: str = "https://notify.twilio.com/v1"
    timeout_seconds: int = 10


@dataclass(frozen=True)
class SlackSettings:
    """Slack Web API 用の設定値コンテナ。"""

    bot_token: str
    base_url: str = "https://slack.com/api"
    timeout_seconds: int = 10


@lru_cache()
def get_twilio_settings() -> Optional[TwilioNotifySettings]:
    """
    環境変数から Twilio Notify 設定を読み込む。

    必須（3つ揃っていない場合は None）:
      - TWILIO_ACCOUNT_SID
      - TWILIO_AUTH_TOKEN
      - TWILIO_NOTIFY_SERVICE_SID

    任意:
      - TWILIO_NOTIFY_BASE_URL（デフォルト https://notify.twilio.com/v1）
      - TWILIO_TIMEOUT_SECONDS（デフォルト 10秒）
    """
    account_sid = get_env("TWILIO_ACCOUNT_SID", required=False)
    auth_token = get_env("TWILIO_AUTH_TOKEN", required=False)
    service_sid = get_env("TWILIO_NOTIFY_SERVICE_SID", required=False)

    if not account_sid or not auth_token or not service_sid:
        return None

    return TwilioNotifySettings(
        account_sid=account_sid,
        auth_token=auth_token,
        service_sid=service_sid,
        base_url=get_env(
            "TWILIO_NOTIFY_BASE_URL",
            default="https://notify.twilio.com/v1",
            required=False,
        ),
        timeout_seconds=get_env_int("TWILIO_TIMEOUT_SECONDS", default=10),
    )


@lru_cache()
def get_slack_settings() -> Optional[SlackSettings]:
    """
    環境変数から Slack 設定を読み込む。

    必須: SLACK_BOT_TOKEN（未設定なら None）
    任意: SLACK_API_BASE_URL, SLACK_TIMEOUT_SECONDS
    """
    bot_token = get_env("SLACK_BOT_TOKEN", required=False)
    if not bot_token:
        return None

    return SlackSettings(
        bot_token=bot_token,
        base_url=get_env("SLACK_API_BASE_URL", default="https://slack.com/api", required=False),
        timeout_seconds=get_env_int("SLACK_TIMEOUT_SECONDS", default=10),
    )
