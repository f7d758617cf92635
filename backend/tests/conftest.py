# backend/tests/conftest.py
"""
Pytest configuration for Lunchbell backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import lunchbell.*` works correctly in tests.
- Clears provider credentials so that no test talks to Twilio / Slack.
- Provides fake binding clients and channel senders shared by the tests.
"""

import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


_ensure_project_root_in_sys_path()

from lunchbell import state  # noqa: E402
from lunchbell.menu.config import get_menu_settings  # noqa: E402
from lunchbell.notifications.client import ChannelBindingError  # noqa: E402
from lunchbell.notifications.config import get_slack_settings, get_twilio_settings  # noqa: E402
from lunchbell.subscribers.config import get_registry_settings  # noqa: E402
from lunchbell.subscribers.service import SubscriberRegistry  # noqa: E402
from lunchbell.subscribers.store import JsonSnapshotStore  # noqa: E402

_PROVIDER_ENV_VARS = (
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_NOTIFY_SERVICE_SID",
    "SLACK_BOT_TOKEN",
    "MENU_URL",
    "MENU_REFRESH_HOUR",
    "MENU_REFRESH_MINUTE",
    "MENU_REFRESH_TIMEZONE",
)


def _clear_settings_cache() -> None:
    get_twilio_settings.cache_clear()
    get_slack_settings.cache_clear()
    get_menu_settings.cache_clear()
    get_registry_settings.cache_clear()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """
    Every test starts without provider credentials, with the snapshot file
    inside tmp_path, and with fresh shared state.
    """
    for name in _PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SUBSCRIBERS_FILE", str(tmp_path / "users.json"))
    _clear_settings_cache()
    state.reset_state()
    yield
    state.reset_state()
    _clear_settings_cache()


class FakeBindingClient:
    """
    In-memory ChannelBindingClient.

    - fail_types: binding types whose creation raises ChannelBindingError
    - fail_deletes: handles whose deletion raises ChannelBindingError
    """

    def __init__(
        self,
        fail_types: Iterable[str] = (),
        fail_deletes: Iterable[str] = (),
    ) -> None:
        self.fail_types: Set[str] = set(fail_types)
        self.fail_deletes: Set[str] = set(fail_deletes)
        self.created: List[Tuple[str, str, str]] = []
        self.deleted: List[str] = []
        self._counter = 0

    def create_binding(self, identity, binding_type, address, tags=()) -> str:
        if binding_type in self.fail_types:
            raise ChannelBindingError(f"cannot bind {binding_type}")
        self._counter += 1
        self.created.append((identity, binding_type, address))
        return f"BS{self._counter:04d}"

    def delete_binding(self, handle: str) -> None:
        if handle in self.fail_deletes:
            raise ChannelBindingError(f"cannot delete {handle}")
        self.deleted.append(handle)


class RecordingSender:
    """ChannelSender that records every call and optionally fails for some identities."""

    def __init__(self, fail_for: Iterable[str] = ()) -> None:
        self.fail_for: Set[str] = set(fail_for)
        self.calls: List[Tuple[str, str, str, Optional[str]]] = []

    def send(self, identity, handle, message, context) -> None:
        if identity in self.fail_for:
            raise RuntimeError(f"send failed for {identity}")
        self.calls.append((identity, handle, message.title, context.menu))


@pytest.fixture
def binding_client() -> FakeBindingClient:
    return FakeBindingClient()


@pytest.fixture
def snapshot_path(tmp_path) -> Path:
    return tmp_path / "users.json"


@pytest.fixture
def make_registry(snapshot_path):
    """
    Factory fixture building SubscriberRegistry instances backed by tmp_path.
    Registries are closed (pending flushes awaited) at teardown.
    """
    created: List[SubscriberRegistry] = []

    def _make(
        client=None,
        initial: Optional[Dict[str, Dict[str, str]]] = None,
    ) -> SubscriberRegistry:
        store = JsonSnapshotStore(snapshot_path)
        if initial is not None:
            store.save(initial)
        registry = SubscriberRegistry(store, client or FakeBindingClient())
        created.append(registry)
        return registry

    yield _make

    for registry in created:
        registry.close()
