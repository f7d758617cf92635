# backend/lunchbell/menu/schemas.py

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MenuState(str, Enum):
    """
    メニューのレディネス状態。
    """

    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class MenuStatus(BaseModel):
    """
    MenuGate の現在の状態スナップショット。
    """

    state: MenuState = Field(MenuState.NOT_LOADED)
    content: Optional[str] = Field(None, description="最後に取得に成功したメニュー。")
    last_attempt_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_error: Optional[str] = None
