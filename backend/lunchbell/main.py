# backend/lunchbell/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /users, /gcm: SMS Webhook・ブラウザ拡張からの登録
- /lunch: ランチ到着通知のファンアウト
- /menu: 今日のメニュー
- 起動時に初回のメニュー取得を待ち、その後は平日定時に更新する
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lunchbell.menu.config import get_menu_settings
from lunchbell.menu.router import router as menu_router
from lunchbell.menu.scheduler import run_refresh_schedule
from lunchbell.notifications.router import router as notifications_router
from lunchbell.registration.router import router as registration_router
from lunchbell.state import get_menu_gate, get_subscriber_registry, reset_state
from lunchbell.utils.config import get_env
from lunchbell.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    起動・終了処理。

    初回のメニュー取得が終わる（成功・失敗どちらでも）まで待ってからリクエストを受け付ける。
    初回取得に失敗しても起動は続け、/menu は 503 を返す。
    """
    logger.warning("Starting up...")
    registry = get_subscriber_registry()
    gate = get_menu_gate()

    logger.info("Waiting for initialization to complete...")
    await asyncio.to_thread(gate.refresh)

    schedule_task = asyncio.create_task(run_refresh_schedule(gate, get_menu_settings()))
    logger.info("Ready to serve requests")

    yield

    logger.warning("Shutting down...")
    schedule_task.cancel()
    try:
        await schedule_task
    except asyncio.CancelledError:
        pass
    except Exception:  # noqa: BLE001 - 終了処理は最後まで続ける
        logger.exception("Menu refresh schedule stopped with an error")

    registry.close()
    # 閉じたレジストリを使い回さないよう共有インスタンスを破棄する
    reset_state()


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - 登録エンドポイント (/users, /gcm)
    - 通知エンドポイント (/lunch)
    - メニューエンドポイント (/menu)
    - ヘルスチェックエンドポイント (/health)
    """
    configure_logging(get_env("LOG_LEVEL", default="INFO", required=False))

    app = FastAPI(title="Lunchbell Backend", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["OPTIONS", "GET", "HEAD", "PUT", "POST", "DELETE"],
        allow_headers=["X-Requested-With"],
    )

    # ルーター登録
    app.include_router(registration_router)
    app.include_router(notifications_router)
    app.include_router(menu_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
