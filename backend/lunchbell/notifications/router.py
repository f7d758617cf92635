# backend/lunchbell/notifications/router.py
from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import PlainTextResponse

from lunchbell.menu.service import MenuGate
from lunchbell.state import get_dispatcher, get_menu_gate

from .schemas import DispatchContext, NotificationMessage
from .service import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])

LUNCH_TITLE = "Lunch"
LUNCH_BODY = "Lunch has arrived!"


@router.post(
    "/lunch",
    summary="登録ユーザー全員にランチ到着を通知",
    response_class=PlainTextResponse,
)
def notify_lunch(
    background_tasks: BackgroundTasks,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    menu_gate: MenuGate = Depends(get_menu_gate),
) -> PlainTextResponse:
    """
    ファンアウトはレスポンス送信後にバックグラウンドで行う。
    個々の送信結果はログで確認する。
    """
    logger.info("POST /lunch")
    context = DispatchContext(menu=menu_gate.current_menu())
    message = NotificationMessage(title=LUNCH_TITLE, body=LUNCH_BODY)
    background_tasks.add_task(dispatcher.dispatch, message, context)
    return PlainTextResponse("Notifying")
