# backend/lunchbell/notifications/factory.py

"""
通知まわりの簡易ファクトリ。

- Twilio Notify が設定されていれば TwilioNotifyClient、なければ LocalBindingClient を使う。
- チャンネルごとに Sender を組み立て、プロバイダ未設定のチャンネルは LoggingChannelSender にする。
"""

from __future__ import annotations

from typing import Dict, Optional

from lunchbell.subscribers.schemas import ChannelKind

from .client import ChannelBindingClient, LocalBindingClient, SlackClient, TwilioNotifyClient
from .config import SlackSettings, TwilioNotifySettings, get_slack_settings, get_twilio_settings
from .service import ChannelSender, LoggingChannelSender, NotifyChannelSender, SlackChannelSender


def build_binding_client(
    twilio_settings: Optional[TwilioNotifySettings] = None,
) -> ChannelBindingClient:
    """
    binding クライアントを生成する。設定がなければ環境変数から読む。
    """
    settings = twilio_settings or get_twilio_settings()
    if settings is None:
        return LocalBindingClient()
    return TwilioNotifyClient(settings)


def build_senders(
    twilio_settings: Optional[TwilioNotifySettings] = None,
    slack_settings: Optional[SlackSettings] = None,
) -> Dict[ChannelKind, ChannelSender]:
    """
    全チャンネル分の Sender を組み立てる。
    """
    twilio = twilio_settings or get_twilio_settings()
    slack = slack_settings or get_slack_settings()

    senders: Dict[ChannelKind, ChannelSender] = {}
    for channel in ChannelKind:
        senders[channel] = LoggingChannelSender(channel)

    if twilio is not None:
        notify_client = TwilioNotifyClient(twilio)
        senders[ChannelKind.SMS] = NotifyChannelSender(notify_client, ChannelKind.SMS)
        senders[ChannelKind.CHROME] = NotifyChannelSender(notify_client, ChannelKind.CHROME)

    if slack is not None:
        senders[ChannelKind.SLACK] = SlackChannelSender(SlackClient(slack))

    return senders


__all__ = [
    "build_binding_client",
    "build_senders",
]
