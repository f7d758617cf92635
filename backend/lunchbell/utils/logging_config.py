# backend/lunchbell/utils/logging_config.py

"""
ロギング初期化。

アプリ起動時に一度だけ呼び出し、コンソールに人間向けのフォーマットで出力する。
各モジュールは logging.getLogger(__name__) を使うだけでよい。
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    ルートロガーにコンソールハンドラを設定する。

    すでにハンドラが設定済み（uvicorn / pytest など）の場合はレベルのみ更新する。
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
