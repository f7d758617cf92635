# backend/lunchbell/state.py

"""
アプリ全体で共有するサービスインスタンスの状態管理モジュール。

- SubscriberRegistry / NotificationDispatcher / MenuGate を初回呼び出し時に生成する
- テスト時にリセットできるようにする

FastAPI の Depends から使う。テストでは dependency_overrides で差し替えてもよい。
"""

from __future__ import annotations

from typing import Optional

from lunchbell.menu.client import MenuClient
from lunchbell.menu.config import get_menu_settings
from lunchbell.menu.service import MenuGate
from lunchbell.notifications.factory import build_binding_client, build_senders
from lunchbell.notifications.service import NotificationDispatcher
from lunchbell.subscribers.config import get_registry_settings
from lunchbell.subscribers.service import SubscriberRegistry
from lunchbell.subscribers.store import JsonSnapshotStore

_registry: Optional[SubscriberRegistry] = None
_dispatcher: Optional[NotificationDispatcher] = None
_menu_gate: Optional[MenuGate] = None


def get_subscriber_registry() -> SubscriberRegistry:
    """
    共有の SubscriberRegistry を返す。初回呼び出し時にスナップショットを読み込む。
    """
    global _registry
    if _registry is None:
        store = JsonSnapshotStore(get_registry_settings().snapshot_path)
        _registry = SubscriberRegistry(store, build_binding_client())
    return _registry


def get_dispatcher() -> NotificationDispatcher:
    """
    共有の NotificationDispatcher を返す。
    """
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher(get_subscriber_registry(), build_senders())
    return _dispatcher


def get_menu_gate() -> MenuGate:
    """
    共有の MenuGate を返す。
    """
    global _menu_gate
    if _menu_gate is None:
        _menu_gate = MenuGate(MenuClient(get_menu_settings()))
    return _menu_gate


def reset_state() -> None:
    """
    テスト用にシングルトン状態をリセットする。
    """
    global _registry, _dispatcher, _menu_gate
    if _registry is not None:
        _registry.close()
    _registry = None
    _dispatcher = None
    _menu_gate = None
