# backend/lunchbell/subscribers/schemas.py

"""
購読者レジストリの共通スキーマ定義。

- ChannelKind: 通知チャンネルの閉じた集合
- RegistrySnapshot: identity → {channel: binding handle} の永続化単位
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

SLACK_BINDING_MARKER = "https://www.slack.com/notifyme"
"""外部 binding を必要としない slack チャンネル用の固定マーカー。"""

Bindings = Dict[str, str]
RegistrySnapshot = Dict[str, Bindings]


class ChannelKind(str, Enum):
    """
    通知チャンネル種別。

    - SMS: Twilio Notify の sms binding
    - SLACK: Slack の DM（外部 binding 不要）
    - CHROME: ブラウザ拡張のプッシュ通知（Twilio Notify の gcm binding）
    """

    SMS = "sms"
    SLACK = "slack"
    CHROME = "chrome"

    @property
    def binding_type(self) -> Optional[str]:
        """
        プロバイダ側の binding 種別。外部 binding 不要なチャンネルは None。
        """
        return _BINDING_TYPES.get(self)

    @property
    def is_external(self) -> bool:
        return self.binding_type is not None

    @classmethod
    def command_channels(cls) -> List["ChannelKind"]:
        """
        SMS コマンドで指定できるチャンネル一覧。

        CHROME はトークンが必要なため /gcm 経由でのみ登録できる。
        """
        return [cls.SMS, cls.SLACK]

    @classmethod
    def from_token(cls, token: str) -> Optional["ChannelKind"]:
        try:
            return cls(token.strip().lower())
        except ValueError:
            return None


_BINDING_TYPES = {
    ChannelKind.SMS: "sms",
    ChannelKind.CHROME: "gcm",
}
