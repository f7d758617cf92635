# backend/lunchbell/notifications/client.py

"""
通知プロバイダとの通信を担当するクライアントモジュール。

- TwilioNotifyClient: binding の作成・削除と identity 宛て通知（sms / gcm）
- SlackClient: chat.postMessage による DM 送信
- LocalBindingClient: プロバイダ未設定時に使うプロセス内の binding 発行
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol

import httpx

from .config import SlackSettings, TwilioNotifySettings

logger = logging.getLogger(__name__)


class ChannelBindingClient(Protocol):
    """
    外部プロバイダ上の binding を作成・削除する最小インターフェース。

    実装例:
    - TwilioNotifyClient: Twilio Notify の Bindings API
    - LocalBindingClient: ログ出力のみ
    """

    def create_binding(
        self,
        identity: str,
        binding_type: str,
        address: str,
        tags: Iterable[str] = (),
    ) -> str:  # pragma: no cover - Protocol
        ...

    def delete_binding(self, handle: str) -> None:  # pragma: no cover - Protocol
        ...


class ChannelBindingError(RuntimeError):
    """binding の作成・削除に失敗した場合の例外。"""


class ChannelSendError(RuntimeError):
    """チャンネルへの送信に失敗した場合の例外。"""


class NotifyClientError(RuntimeError):
    """Twilio Notify クライアント全般の基底例外。"""


class NotifyHTTPError(NotifyClientError):
    """HTTP ステータスコードがエラーだった場合の例外。"""

    def __init__(self, status_code: int, body: Any | None = None) -> None:
        super().__init__(f"Twilio Notify API error: status_code={status_code}")
        self.status_code = status_code
        self.body = body


class NotifyConnectionError(NotifyClientError):
    """接続エラー・タイムアウト時の例外。"""


class SlackClientError(RuntimeError):
    """Slack クライアント全般の例外。"""


class TwilioNotifyClient:
    """
    Twilio Notify REST API の薄いラッパークライアント。

    ChannelBindingClient として create_binding / delete_binding を提供し、
    送信用に notify_identity も持つ。
    """

    def __init__(
        self,
        settings: TwilioNotifySettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def service_url(self) -> str:
        return f"{self._settings.base_url.rstrip('/')}/Services/{self._settings.service_sid}"

    @property
    def timeout(self) -> int:
        return self._settings.timeout_seconds

    def _request(self, method: str, path: str, data: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """
        Notify API を呼び出し、2xx 以外は NotifyHTTPError に変換する。
        """
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(
                    method,
                    f"{self.service_url}{path}",
                    data=data,
                    auth=(self._settings.account_sid, self._settings.auth_token),
                )
        except httpx.RequestError as exc:
            raise NotifyConnectionError(str(exc)) from exc

        if response.status_code // 100 != 2:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise NotifyHTTPError(status_code=response.status_code, body=body)

        return response

    def create_binding(
        self,
        identity: str,
        binding_type: str,
        address: str,
        tags: Iterable[str] = (),
    ) -> str:
        """
        identity に対する binding を作成し、発行された binding SID を返す。

        :raises ChannelBindingError: API エラー・接続エラー・SID 欠落時。
        """
        data: Dict[str, Any] = {
            "Identity": identity,
            "BindingType": binding_type,
            "Address": address,
        }
        tag_list: List[str] = list(tags)
        if tag_list:
            data["Tag"] = tag_list

        try:
            response = self._request("POST", "/Bindings", data=data)
            payload = response.json()
        except NotifyClientError as exc:
            raise ChannelBindingError(f"Failed to create {binding_type} binding for {identity}: {exc}") from exc
        except ValueError as exc:
            raise ChannelBindingError(f"Invalid binding response for {identity}") from exc

        sid = payload.get("sid") if isinstance(payload, dict) else None
        if not sid:
            raise ChannelBindingError(f"Binding response for {identity} has no sid")
        return str(sid)

    def delete_binding(self, handle: str) -> None:
        """
        binding SID を指定して binding を削除する。
        """
        try:
            self._request("DELETE", f"/Bindings/{handle}")
        except NotifyClientError as exc:
            raise ChannelBindingError(f"Failed to delete binding {handle}: {exc}") from exc

    def notify_identity(self, identity: str, body: str, tags: Iterable[str] = ()) -> None:
        """
        identity 宛てに通知を送る。tags を指定すると該当 binding 種別だけに絞る。
        """
        data: Dict[str, Any] = {"Identity": identity, "Body": body}
        tag_list = list(tags)
        if tag_list:
            data["Tag"] = tag_list

        try:
            self._request("POST", "/Notifications", data=data)
        except NotifyClientError as exc:
            raise ChannelSendError(f"Failed to notify {identity}: {exc}") from exc


class SlackClient:
    """
    Slack Web API の chat.postMessage だけを扱うクライアント。
    """

    def __init__(
        self,
        settings: SlackSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }

    def post_message(self, channel: str, text: str, attachments: Iterable[str] = ()) -> None:
        """
        メッセージを投稿する。attachments は添付テキストのリスト。

        :raises SlackClientError: HTTP エラー・接続エラー・ok=false の場合。
        """
        payload: Dict[str, Any] = {"channel": channel, "text": text}
        attachment_list = [{"text": a} for a in attachments if a]
        if attachment_list:
            payload["attachments"] = attachment_list

        url = f"{self._settings.base_url.rstrip('/')}/chat.postMessage"
        try:
            with httpx.Client(timeout=self._settings.timeout_seconds, transport=self._transport) as client:
                response = client.post(url, json=payload, headers=self._build_headers())
        except httpx.RequestError as exc:
            raise SlackClientError(f"Failed to call Slack API: {exc}") from exc

        if response.status_code >= 400:
            raise SlackClientError(f"Slack API error: {response.status_code} {response.text}")

        try:
            data = response.json()
        except ValueError as exc:
            raise SlackClientError("Unexpected Slack API response: not JSON") from exc

        if not data.get("ok", False):
            raise SlackClientError(f"Slack API returned error: {data.get('error', 'unknown')}")


class LocalBindingClient:
    """
    プロバイダ未設定時に使う ChannelBindingClient。

    外部呼び出しは行わず、ローカルで binding ID を発行してログに残すだけ。
    """

    def __init__(self, logger_: logging.Logger | None = None) -> None:
        self._logger = logger_ or logger

    def create_binding(
        self,
        identity: str,
        binding_type: str,
        address: str,
        tags: Iterable[str] = (),
    ) -> str:
        handle = f"local-{binding_type}-{uuid.uuid4().hex}"
        self._logger.info("Created local %s binding %s for %s", binding_type, handle, identity)
        return handle

    def delete_binding(self, handle: str) -> None:
        self._logger.info("Deleted local binding %s", handle)
