# backend/lunchbell/registration/__init__.py

"""
SMS Webhook 経由の登録コマンドとブラウザ拡張の binding 管理。

- schemas: 登録コマンドの文法とパーサ
- twiml: Webhook に返す TwiML レスポンスの組み立て
- router: /users, /gcm エンドポイント
"""

from .schemas import (  # noqa: F401
    MalformedCommand,
    NoValidChannels,
    RegistrationCommand,
    parse_registration_command,
)
