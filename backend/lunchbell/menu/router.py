# backend/lunchbell/menu/router.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from lunchbell.state import get_menu_gate

from .schemas import MenuStatus
from .service import MenuGate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/menu", tags=["menu"])

MENU_UNAVAILABLE = "Today's menu is currently unavailable, try again later."


@router.get(
    "",
    summary="今日のメニュー",
    response_class=PlainTextResponse,
)
def get_menu(menu_gate: MenuGate = Depends(get_menu_gate)) -> PlainTextResponse:
    """
    一度も取得できていない場合は 503 を返す。取得失敗後は直近の内容を返す。
    """
    logger.info("GET /menu")
    content = menu_gate.current_menu()
    if content is None:
        return PlainTextResponse(MENU_UNAVAILABLE, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return PlainTextResponse(content)


@router.get(
    "/status",
    response_model=MenuStatus,
    summary="メニュー取得状態",
)
def get_menu_status(menu_gate: MenuGate = Depends(get_menu_gate)) -> MenuStatus:
    return menu_gate.status()
