# backend/tests/test_notifications_client.py

import json
from urllib.parse import parse_qs

import httpx
import pytest

from lunchbell.notifications.client import (
    ChannelBindingError,
    ChannelSendError,
    LocalBindingClient,
    NotifyClientError,
    NotifyHTTPError,
    SlackClient,
    SlackClientError,
    TwilioNotifyClient,
)
from lunchbell.notifications.config import (
    SlackSettings,
    TwilioNotifySettings,
    get_slack_settings,
    get_twilio_settings,
)
from lunchbell.notifications.factory import build_binding_client, build_senders
from lunchbell.notifications.service import (
    LoggingChannelSender,
    NotifyChannelSender,
    SlackChannelSender,
)
from lunchbell.subscribers.schemas import ChannelKind

TWILIO = TwilioNotifySettings(
    account_sid="AC123",
    auth_token="secret",
    service_sid="IS456",
    base_url="https://notify.example.com/v1",
)
SLACK = SlackSettings(bot_token="xoxb-test", base_url="https://slack.example.com/api")


def _twilio_client(handler) -> TwilioNotifyClient:
    return TwilioNotifyClient(TWILIO, transport=httpx.MockTransport(handler))


def test_notify_http_error_is_client_error() -> None:
    assert issubclass(NotifyHTTPError, NotifyClientError)


def test_create_binding_posts_form_and_returns_sid() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization", "")
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "BS0001"})

    handle = _twilio_client(handler).create_binding("jdoe", "sms", "+15550001111", tags=["lunch"])

    assert handle == "BS0001"
    assert seen["method"] == "POST"
    assert seen["url"] == "https://notify.example.com/v1/Services/IS456/Bindings"
    assert seen["auth"].startswith("Basic ")
    assert seen["form"] == {
        "Identity": ["jdoe"],
        "BindingType": ["sms"],
        "Address": ["+15550001111"],
        "Tag": ["lunch"],
    }


def test_create_binding_http_error_raises_binding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "invalid address"})

    with pytest.raises(ChannelBindingError):
        _twilio_client(handler).create_binding("jdoe", "sms", "bogus")


def test_create_binding_connection_error_raises_binding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(ChannelBindingError):
        _twilio_client(handler).create_binding("jdoe", "sms", "+1")


def test_create_binding_without_sid_raises_binding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={})

    with pytest.raises(ChannelBindingError):
        _twilio_client(handler).create_binding("jdoe", "sms", "+1")


def test_delete_binding() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(204)

    _twilio_client(handler).delete_binding("BS0001")

    assert seen == {"method": "DELETE", "path": "/v1/Services/IS456/Bindings/BS0001"}


def test_delete_binding_error_raises_binding_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    with pytest.raises(ChannelBindingError):
        _twilio_client(handler).delete_binding("BS0001")


def test_notify_identity_sends_tagged_notification() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "NT1"})

    _twilio_client(handler).notify_identity("jdoe", "Lunch", tags=["sms"])

    assert seen["path"] == "/v1/Services/IS456/Notifications"
    assert seen["form"] == {"Identity": ["jdoe"], "Body": ["Lunch"], "Tag": ["sms"]}


def test_notify_identity_error_raises_send_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with pytest.raises(ChannelSendError):
        _twilio_client(handler).notify_identity("jdoe", "Lunch")


def test_slack_post_message_payload() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["json"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    client = SlackClient(SLACK, transport=httpx.MockTransport(handler))
    client.post_message("@jdoe", "*Lunch has arrived!*", ["Tacos", ""])

    assert seen["url"] == "https://slack.example.com/api/chat.postMessage"
    assert seen["auth"] == "Bearer xoxb-test"
    assert seen["json"] == {
        "channel": "@jdoe",
        "text": "*Lunch has arrived!*",
        "attachments": [{"text": "Tacos"}],
    }


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"ok": False, "error": "channel_not_found"}),
        httpx.Response(500, text="oops"),
        httpx.Response(200, text="not json"),
    ],
)
def test_slack_post_message_errors(response) -> None:
    client = SlackClient(SLACK, transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(SlackClientError):
        client.post_message("@jdoe", "hi")


def test_local_binding_client_issues_unique_handles() -> None:
    client = LocalBindingClient()

    first = client.create_binding("jdoe", "sms", "+1")
    second = client.create_binding("jdoe", "sms", "+1")

    assert first != second
    assert first.startswith("local-sms-")
    client.delete_binding(first)


def test_factory_without_credentials_uses_local_and_logging_implementations() -> None:
    assert get_twilio_settings() is None
    assert get_slack_settings() is None

    assert isinstance(build_binding_client(), LocalBindingClient)
    senders = build_senders()
    assert set(senders) == set(ChannelKind)
    assert all(isinstance(s, LoggingChannelSender) for s in senders.values())


def test_factory_with_credentials_uses_provider_clients() -> None:
    assert isinstance(build_binding_client(TWILIO), TwilioNotifyClient)

    senders = build_senders(TWILIO, SLACK)

    assert isinstance(senders[ChannelKind.SMS], NotifyChannelSender)
    assert isinstance(senders[ChannelKind.CHROME], NotifyChannelSender)
    assert isinstance(senders[ChannelKind.SLACK], SlackChannelSender)


def test_twilio_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC1")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "tok")
    monkeypatch.setenv("TWILIO_NOTIFY_SERVICE_SID", "IS1")
    monkeypatch.setenv("TWILIO_TIMEOUT_SECONDS", "not-a-number")
    get_twilio_settings.cache_clear()

    settings = get_twilio_settings()

    assert settings is not None
    assert settings.account_sid == "AC1"
    assert settings.base_url == "https://notify.twilio.com/v1"
    assert settings.timeout_seconds == 10
