# backend/lunchbell/menu/client.py

"""
メニュー取得元との通信を担当するクライアントモジュール。
"""

from __future__ import annotations

from typing import Optional

import httpx

from .config import MenuSettings


class MenuFetchError(RuntimeError):
    """メニュー取得に失敗した場合の例外。"""


class MenuClient:
    """
    今日のメニューをテキストとして取得する HTTP クライアント。
    """

    def __init__(
        self,
        settings: MenuSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def fetch_todays_menu(self) -> str:
        """
        今日のメニューを取得する。

        :raises MenuFetchError: URL 未設定・接続エラー・HTTP エラー・空のメニューの場合。
        """
        if not self._settings.url:
            raise MenuFetchError("MENU_URL is not configured.")

        try:
            with httpx.Client(timeout=self._settings.timeout_seconds, transport=self._transport) as client:
                response = client.get(self._settings.url)
        except httpx.RequestError as exc:
            raise MenuFetchError(f"Failed to fetch menu: {exc}") from exc

        if response.status_code >= 400:
            raise MenuFetchError(f"Menu provider error: {response.status_code}")

        content = response.text.strip()
        if not content:
            raise MenuFetchError("Menu provider returned an empty menu.")
        return content
