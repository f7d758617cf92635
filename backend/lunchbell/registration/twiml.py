# backend/lunchbell/registration/twiml.py

"""
SMS Webhook に返す TwiML レスポンスの組み立て。
"""

from __future__ import annotations

from typing import Iterable, List
from xml.sax.saxutils import escape

from .schemas import supported_channels

TWIML_MEDIA_TYPE = "application/xml"


def build_twiml(messages: Iterable[str]) -> str:
    """
    <Response><Message>...</Message>...</Response> を組み立てる。
    """
    parts = [f"<Message>{escape(message)}</Message>" for message in messages]
    return "<Response>" + "".join(parts) + "</Response>"


def _supported_channels_line() -> str:
    return (
        f"Supported channels are {', '.join(supported_channels())}.\n"
        "Ex: jdoe: sms, slack"
    )


def help_messages() -> List[str]:
    return [
        "Register by texting:\n"
        "[ldap username]: [comma separated list of channels to be notified on]",
        _supported_channels_line(),
        "If you would like to unsubscribe text:\n[ldap username]: stop",
    ]


def no_valid_channels_messages() -> List[str]:
    return [
        "You must specify at least one valid channel",
        _supported_channels_line(),
    ]


def unsubscribed_messages(identity: str) -> List[str]:
    return [f"You have been unsubscribed, {identity}"]


def subscribed_messages(identity: str, channels: Iterable[str], *, already_registered: bool) -> List[str]:
    channel_text = ", ".join(channels)
    if already_registered:
        text = (
            f"Looks like you are already registered {identity}.\n"
            f"We've updated your notification preferences to {channel_text}."
        )
    else:
        text = (
            f"Thanks for signing up {identity}. "
            f"You're signed up to receive notifications on {channel_text}."
        )
    return [f"{text}\nWe'll let you know when lunch arrives."]
