# backend/lunchbell/registration/schemas.py

"""
登録コマンドの文法。

    <identity> ":" <payload>

- identity は前後の空白を除いて小文字化し、空であってはならない。
- payload は解除キーワード（stop、大文字小文字を区別しない）か、
  カンマ区切りのチャンネル一覧。未知のチャンネルは黙って捨てる。
- 有効なチャンネルが 1つも残らなくてもパースは成功する
  （「最低 1チャンネル」は呼び出し側のルールで、ヘルプを返すため）。
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from lunchbell.subscribers.schemas import ChannelKind

UNSUBSCRIBE_KEYWORD = "stop"


class MalformedCommand(ValueError):
    """メッセージが登録コマンドの文法に合わない場合の例外。"""


class NoValidChannels(ValueError):
    """購読コマンドに有効なチャンネルが 1つもない場合の例外。"""


class RegistrationCommand(BaseModel):
    """
    受信メッセージ 1件分の登録コマンド。永続化はしない。
    """

    identity: str = Field(..., min_length=1, description="正規化済みのユーザー名。")
    is_unsubscribe: bool = Field(False, description="解除コマンドかどうか。")
    channels: List[ChannelKind] = Field(
        default_factory=list,
        description="指定された有効チャンネル（指定順・重複なし）。",
    )

    def require_channels(self) -> List[ChannelKind]:
        """
        購読コマンドのチャンネルを返す。1つもなければ NoValidChannels。
        """
        if not self.channels:
            raise NoValidChannels("You must specify at least one valid channel")
        return list(self.channels)


def supported_channels() -> List[str]:
    return [channel.value for channel in ChannelKind.command_channels()]


def _parse_channels(payload: str) -> List[ChannelKind]:
    allowed = set(ChannelKind.command_channels())
    channels: List[ChannelKind] = []
    for token in payload.split(","):
        channel = ChannelKind.from_token(token)
        if channel is None or channel not in allowed or channel in channels:
            continue
        channels.append(channel)
    return channels


def parse_registration_command(text: str | None) -> RegistrationCommand:
    """
    生のメッセージ本文を RegistrationCommand に変換する。

    :raises MalformedCommand: 空メッセージ・区切り文字なし・identity なしの場合。
    """
    if text is None or not text.strip():
        raise MalformedCommand("Empty registration message")

    identity, sep, payload = text.partition(":")
    if not sep:
        raise MalformedCommand("Registration message has no ':' separator")

    identity = identity.strip().lower()
    if not identity:
        raise MalformedCommand("Registration message has no identity")

    if payload.strip().lower() == UNSUBSCRIBE_KEYWORD:
        return RegistrationCommand(identity=identity, is_unsubscribe=True)

    return RegistrationCommand(identity=identity, channels=_parse_channels(payload))
