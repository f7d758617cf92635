# backend/lunchbell/notifications/service.py

"""
チャンネル別の通知 Sender と、全購読者へのファンアウト。

- ChannelSender: (identity, handle) 単位で送信する最小インターフェース
- NotifyChannelSender: Twilio Notify 経由（sms / chrome）
- SlackChannelSender: Slack DM 経由（メニューを添付）
- LoggingChannelSender: プロバイダ未設定時のログ出力のみ
- NotificationDispatcher: レジストリ全体に 1 メッセージをファンアウトする
"""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

from lunchbell.subscribers.schemas import ChannelKind
from lunchbell.subscribers.service import SubscriberRegistry

from .client import ChannelSendError, SlackClient, SlackClientError, TwilioNotifyClient
from .schemas import DispatchContext, DispatchFailure, DispatchReport, NotificationMessage

logger = logging.getLogger(__name__)


class ChannelSender(Protocol):
    """
    1チャンネル分の送信インターフェース。

    失敗時は ChannelSendError（またはその他の例外）を投げる。
    Dispatcher 側で捕捉して集計する。
    """

    def send(
        self,
        identity: str,
        handle: str,
        message: NotificationMessage,
        context: DispatchContext,
    ) -> None:  # pragma: no cover - Protocol
        ...


class LoggingChannelSender:
    """
    送信内容を logger に記録するだけの Sender。

    - 開発環境やプロバイダ未設定時のデフォルト実装
    - 実際の外部サービスへの送信は行わない
    """

    def __init__(self, channel: ChannelKind, logger_: logging.Logger | None = None) -> None:
        self._channel = channel
        self._logger = logger_ or logger

    def send(
        self,
        identity: str,
        handle: str,
        message: NotificationMessage,
        context: DispatchContext,
    ) -> None:
        self._logger.info("[%s] %s: %s", self._channel.value, identity, message.title)


class NotifyChannelSender:
    """
    Twilio Notify で identity 宛てに送信する Sender。

    同じ identity の他の binding に重複送信しないよう、binding 種別のタグで絞る。
    """

    def __init__(self, client: TwilioNotifyClient, channel: ChannelKind) -> None:
        self._client = client
        self._channel = channel

    def send(
        self,
        identity: str,
        handle: str,
        message: NotificationMessage,
        context: DispatchContext,
    ) -> None:
        self._client.notify_identity(identity, message.title, tags=[self._channel.binding_type])


class SlackChannelSender:
    """
    Slack DM で送信する Sender。メニューがあれば添付する。
    """

    def __init__(self, client: SlackClient) -> None:
        self._client = client

    def send(
        self,
        identity: str,
        handle: str,
        message: NotificationMessage,
        context: DispatchContext,
    ) -> None:
        attachments = [context.menu] if context.menu else []
        try:
            self._client.post_message(f"@{identity}", f"*{message.body}*", attachments)
        except SlackClientError as exc:
            raise ChannelSendError(str(exc)) from exc


class NotificationDispatcher:
    """
    レジストリの全購読者・全チャンネルにメッセージをファンアウトするサービス。

    (購読者, チャンネル) ごとの送信は独立しており、1件の失敗が他の送信を止めることはない。
    失敗は DispatchReport に集計し、ログにも残す。
    """

    def __init__(
        self,
        registry: SubscriberRegistry,
        senders: Mapping[ChannelKind, ChannelSender],
    ) -> None:
        self._registry = registry
        self._senders = dict(senders)

    def dispatch(
        self,
        message: NotificationMessage,
        context: DispatchContext | None = None,
    ) -> DispatchReport:
        """
        現時点の全購読者に message を送信し、集計結果を返す。
        """
        context = context or DispatchContext()
        report = DispatchReport()

        for identity, bindings in self._registry.list_subscribers().items():
            logger.info("Notifying %s", identity)
            for channel_value, handle in bindings.items():
                report.attempted += 1
                channel = ChannelKind.from_token(channel_value)
                sender = self._senders.get(channel) if channel is not None else None
                if sender is None:
                    self._record_failure(report, identity, channel_value, "no sender configured")
                    continue

                try:
                    sender.send(identity, handle, message, context)
                except Exception as exc:  # noqa: BLE001 - 1件の失敗でファンアウトを止めない
                    self._record_failure(report, identity, channel_value, str(exc))
                    continue

                report.sent += 1

        if report.failures:
            logger.warning(
                "Dispatch finished with %d/%d failed sends", report.failed, report.attempted
            )
        else:
            logger.info("Dispatch finished: %d sends", report.sent)
        return report

    @staticmethod
    def _record_failure(
        report: DispatchReport, identity: str, channel_value: str, error: str
    ) -> None:
        logger.warning("Failed to notify %s on %s: %s", identity, channel_value, error)
        report.failures.append(DispatchFailure(identity=identity, channel=channel_value, error=error))
