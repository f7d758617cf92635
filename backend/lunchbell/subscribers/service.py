# backend/lunchbell/subscribers/service.py

"""
購読者レジストリ本体。

責務:
- identity → {channel: binding handle} のインメモリ状態の保持
- 登録（binding の作り直し）・解除（外部 binding の削除）
- ブラウザ拡張のプッシュ binding の追加・削除
- スナップショットの非同期永続化

ロックは持たない。同一 identity への並行登録は「最後に代入したものが勝つ」。
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Optional

from lunchbell.notifications.client import ChannelBindingClient, ChannelBindingError

from .schemas import SLACK_BINDING_MARKER, Bindings, ChannelKind, RegistrySnapshot
from .store import JsonSnapshotStore, SnapshotStoreError

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """
    購読者の binding を管理するサービス。

    永続化は fire-and-forget:
    - 変更系の操作は persist() を呼んで Future を返すだけで、書き込み完了は待たない。
    - 書き込みを待ちたい呼び出し元（テストなど）は返された Future を待つ。
    """

    def __init__(
        self,
        store: JsonSnapshotStore,
        binding_client: ChannelBindingClient,
        *,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self._store = store
        self._binding_client = binding_client
        self._subscribers: RegistrySnapshot = store.load()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="registry-persist"
        )
        self._closed = False
        logger.info("Num subscribed users %d", len(self._subscribers))

    # ---- 参照系 --------------------------------------------------------

    def __len__(self) -> int:
        return len(self._subscribers)

    def is_subscribed(self, identity: str) -> bool:
        return identity in self._subscribers

    def list_subscribers(self) -> RegistrySnapshot:
        """
        レジストリ全体のコピーを返す。呼び出し元が変更しても内部状態には影響しない。
        """
        return {identity: dict(bindings) for identity, bindings in self._subscribers.copy().items()}

    # ---- 変更系 --------------------------------------------------------

    def subscribe(
        self,
        identity: str,
        channels: Iterable[ChannelKind],
        contact_address: str,
    ) -> Bindings:
        """
        identity の binding を指定チャンネルで作り直す（既存 binding とはマージしない）。

        - 外部 binding 不要なチャンネルは固定マーカーを保存する。
        - それ以外は contact_address で binding を作成し、返ってきた handle を保存する。
        - binding 作成に失敗したチャンネルは結果から除外し、ログに残す。
        - 全チャンネルの処理後に 1 回だけ永続化する。
        """
        bindings: Bindings = {}
        for channel in channels:
            if not channel.is_external:
                bindings[channel.value] = SLACK_BINDING_MARKER
                continue

            try:
                handle = self._binding_client.create_binding(
                    identity, channel.binding_type, contact_address
                )
            except ChannelBindingError as exc:
                logger.warning("Failed to add %s binding for user %s: %s", channel.value, identity, exc)
                continue

            bindings[channel.value] = handle

        self._subscribers[identity] = bindings
        logger.info("Subscribed %s on %s", identity, ", ".join(bindings) or "no channels")
        self.persist()
        return dict(bindings)

    def unsubscribe(self, identity: str) -> bool:
        """
        identity を解除する。未登録の identity は何もしない。

        :return: 解除対象が存在したかどうか。
        """
        bindings = self._subscribers.pop(identity, None)
        if bindings is None:
            return False

        for channel_value, handle in bindings.items():
            self._delete_external_binding(identity, channel_value, handle)

        logger.info("Unsubscribed %s", identity)
        self.persist()
        return True

    def bind_browser_push(self, identity: str, token: str) -> Optional[str]:
        """
        ブラウザ拡張のプッシュトークンで chrome binding を追加する。

        identity が未登録なら空の購読者として作成する。
        binding 作成に失敗した場合はログに残して None を返す。
        """
        if identity not in self._subscribers:
            logger.info("User %s does not exist, creating..", identity)
            self._subscribers[identity] = {}

        channel = ChannelKind.CHROME
        try:
            handle = self._binding_client.create_binding(identity, channel.binding_type, token)
        except ChannelBindingError as exc:
            logger.warning("Failed to create gcm binding for %s: %s", identity, exc)
            return None

        # 解除と競合した場合は購読者を作り直す
        self._subscribers.setdefault(identity, {})[channel.value] = handle
        self.persist()
        return handle

    def unbind_browser_push(self, identity: str) -> bool:
        """
        chrome binding を削除する。binding がなければ何もしない。
        """
        bindings = self._subscribers.get(identity)
        if not bindings or ChannelKind.CHROME.value not in bindings:
            return False

        handle = bindings.pop(ChannelKind.CHROME.value)
        self._delete_external_binding(identity, ChannelKind.CHROME.value, handle)
        self.persist()
        return True

    # ---- 永続化 --------------------------------------------------------

    def persist(self) -> "Future[None]":
        """
        現在のスナップショットの書き込みをバックグラウンドに投げる。

        書き込み同士は直列化しない。失敗はログに残し、Future にも例外として残る。
        close() 後は書き込まず、SnapshotStoreError を持つ完了済み Future を返す。
        """
        if not self._closed:
            try:
                return self._executor.submit(self._flush)
            except RuntimeError:
                # executor が外部で止められた場合
                pass

        logger.warning("Subscriber registry is closed, skipping persist")
        future: "Future[None]" = Future()
        future.set_exception(SnapshotStoreError("Subscriber registry is closed"))
        return future

    def close(self) -> None:
        """
        未完了の書き込みを待ってから executor を止める。
        """
        self._closed = True
        self._executor.shutdown(wait=True)

    # ---- 内部ヘルパー --------------------------------------------------

    def _flush(self) -> None:
        snapshot = self.list_subscribers()
        try:
            self._store.save(snapshot)
        except SnapshotStoreError as exc:
            logger.warning("Unable to persist users... %s", exc)
            raise

    def _delete_external_binding(self, identity: str, channel_value: str, handle: str) -> None:
        kind = ChannelKind.from_token(channel_value)
        if kind is not None and not kind.is_external:
            return

        try:
            self._binding_client.delete_binding(handle)
        except ChannelBindingError as exc:
            logger.warning("Failed to delete %s binding for %s: %s", channel_value, identity, exc)
