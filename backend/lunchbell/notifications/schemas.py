# backend/lunchbell/notifications/schemas.py

"""
通知メッセージとディスパッチ結果の共通スキーマ定義。

- NotificationMessage: 全チャンネル共通のタイトル＋本文
- DispatchContext: チャンネル固有の追加情報（slack 向けのメニューなど）
- DispatchReport: 1回のファンアウトの集計結果
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationMessage(BaseModel):
    """
    通知 1件分の情報。

    title は SMS / プッシュの短い本文、body はチャット向けの本文として使う。
    """

    title: str = Field(..., description="短いタイトル（SMS / プッシュ通知の本文）。")
    body: str = Field(..., description="本文。プレーンテキスト想定。")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="通知生成時刻（UTC）。",
    )


class DispatchContext(BaseModel):
    """
    チャンネル固有の追加コンテキスト。

    現時点では slack がメニュー本文を添付として使うだけで、他チャンネルは無視する。
    """

    menu: Optional[str] = Field(None, description="今日のメニュー（未取得なら None）。")


class DispatchStatus(str, Enum):
    """
    ファンアウト全体のステータス。
    """

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"
    EMPTY = "empty"


class DispatchFailure(BaseModel):
    """
    (購読者, チャンネル) 単位の送信失敗。
    """

    identity: str
    channel: str = Field(..., description="チャンネル種別の値（sms / slack / chrome）。")
    error: str


class DispatchReport(BaseModel):
    """
    1回のディスパッチの集計結果。
    """

    attempted: int = Field(0, ge=0, description="送信を試みた (購読者, チャンネル) の数。")
    sent: int = Field(0, ge=0, description="送信に成功した数。")
    failures: List[DispatchFailure] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def status(self) -> DispatchStatus:
        if self.attempted == 0:
            return DispatchStatus.EMPTY
        if not self.failures:
            return DispatchStatus.SUCCESS
        if self.sent == 0:
            return DispatchStatus.FAILURE
        return DispatchStatus.PARTIAL
