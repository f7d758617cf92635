# backend/lunchbell/registration/router.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request, Response, status
from fastapi.responses import PlainTextResponse

from lunchbell.state import get_subscriber_registry
from lunchbell.subscribers.schemas import RegistrySnapshot
from lunchbell.subscribers.service import SubscriberRegistry

from .schemas import MalformedCommand, NoValidChannels, parse_registration_command
from .twiml import (
    TWIML_MEDIA_TYPE,
    build_twiml,
    help_messages,
    no_valid_channels_messages,
    subscribed_messages,
    unsubscribed_messages,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["registration"])


def _twiml_response(messages) -> Response:
    return Response(content=build_twiml(messages), media_type=TWIML_MEDIA_TYPE)


async def _read_params(request: Request) -> Dict[str, str]:
    """
    フォーム / JSON どちらのボディも受け付けて文字列の辞書にする。
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


@router.post(
    "/users",
    summary="SMS Webhook からの登録・解除コマンド",
    response_class=Response,
)
def register_user(
    background_tasks: BackgroundTasks,
    sender: str = Form("", alias="From"),
    body: Optional[str] = Form(None, alias="Body"),
    registry: SubscriberRegistry = Depends(get_subscriber_registry),
) -> Response:
    """
    SMS 本文の登録コマンドを処理し、TwiML で返信する。

    - 文法エラー → ヘルプメッセージ
    - stop → 解除（外部 binding の削除を含む）
    - 有効チャンネルなし → チャンネル指定を促すメッセージ
    - 購読 → 返信を先に返し、binding 作成と永続化はレスポンス後に行う
    """
    logger.info("POST /users From:%s Body: %s", sender, body)
    try:
        command = parse_registration_command(body)
    except MalformedCommand:
        return _twiml_response(help_messages())

    if command.is_unsubscribe:
        registry.unsubscribe(command.identity)
        return _twiml_response(unsubscribed_messages(command.identity))

    try:
        channels = command.require_channels()
    except NoValidChannels:
        return _twiml_response(no_valid_channels_messages())

    already_registered = registry.is_subscribed(command.identity)
    background_tasks.add_task(registry.subscribe, command.identity, channels, sender)

    return _twiml_response(
        subscribed_messages(
            command.identity,
            [channel.value for channel in channels],
            already_registered=already_registered,
        )
    )


@router.get(
    "/users",
    summary="登録済みユーザー一覧",
)
def list_users(
    registry: SubscriberRegistry = Depends(get_subscriber_registry),
) -> RegistrySnapshot:
    logger.info("GET /users")
    return registry.list_subscribers()


@router.post(
    "/gcm",
    summary="ブラウザ拡張のプッシュ binding を登録",
    response_class=PlainTextResponse,
)
async def register_gcm(
    request: Request,
    background_tasks: BackgroundTasks,
    registry: SubscriberRegistry = Depends(get_subscriber_registry),
) -> PlainTextResponse:
    params = await _read_params(request)
    user = params.get("User", "").strip().lower()
    token = params.get("Token", "").strip()
    if not user or not token:
        return PlainTextResponse(
            "Must provide User and Token params",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    logger.info("POST /gcm User: %s Token: %s", user, token)
    background_tasks.add_task(registry.bind_browser_push, user, token)
    return PlainTextResponse("Registered GCM!")


@router.delete(
    "/gcm",
    summary="ブラウザ拡張のプッシュ binding を解除",
)
async def unregister_gcm(
    request: Request,
    background_tasks: BackgroundTasks,
    registry: SubscriberRegistry = Depends(get_subscriber_registry),
) -> Response:
    params = await _read_params(request)
    user = params.get("User", "").strip().lower()
    if not user:
        logger.info("Must provide User to delete GCM")
        return PlainTextResponse(
            "Must provide User param",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    logger.info("DELETE /gcm User: %s", user)
    background_tasks.add_task(registry.unbind_browser_push, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
