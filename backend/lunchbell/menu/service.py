# backend/lunchbell/menu/service.py

"""
今日のメニューのレディネス管理。

- refresh(): メニュー取得元から取得し、結果を記録する
- current_menu(): 一度でも取得できていればその内容（失敗後は古い内容）を返す
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from .client import MenuFetchError
from .schemas import MenuState, MenuStatus

logger = logging.getLogger(__name__)


class MenuProvider(Protocol):
    def fetch_todays_menu(self) -> str:  # pragma: no cover - Protocol
        ...


class MenuGate:
    """
    最新のメニュー取得結果を保持するサービス。

    取得に失敗しても以前の内容は消さない（古いメニューでも無いよりはよい）。
    状態は MenuStatus ごと置き換えるため、読み手が途中状態を見ることはない。
    """

    def __init__(self, provider: MenuProvider) -> None:
        self._provider = provider
        self._status = MenuStatus()

    def status(self) -> MenuStatus:
        return self._status

    def current_menu(self) -> Optional[str]:
        """
        提供可能なメニューを返す。一度も取得できていなければ None。
        """
        return self._status.content

    def refresh(self) -> MenuStatus:
        """
        メニューを取得し直して状態を更新する。例外は投げない。
        """
        previous = self._status
        now = datetime.now(timezone.utc)

        try:
            content = self._provider.fetch_todays_menu()
        except MenuFetchError as exc:
            logger.warning("Failed to load menu: %s", exc)
            self._status = previous.model_copy(
                update={
                    "state": MenuState.LOAD_FAILED,
                    "last_attempt_at": now,
                    "last_error": str(exc),
                }
            )
            return self._status

        logger.info("Got menu %s", content)
        self._status = MenuStatus(
            state=MenuState.LOADED,
            content=content,
            last_attempt_at=now,
            last_success_at=now,
            last_error=None,
        )
        return self._status
