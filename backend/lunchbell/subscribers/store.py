# backend/lunchbell/subscribers/store.py

"""
レジストリのスナップショットを JSON ファイルへ永続化するストア。

スナップショットは常に丸ごと上書きする（追記・差分書き込みはしない）。
同一ディレクトリの一時ファイルに書いてから os.replace で置き換えるため、
読み手が書きかけの JSON を見ることはない。
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

from .schemas import RegistrySnapshot

logger = logging.getLogger(__name__)


class SnapshotStoreError(RuntimeError):
    """スナップショットの保存に失敗した場合の例外。"""


def _is_valid_snapshot(data: Any) -> bool:
    if not isinstance(data, dict):
        return False
    for identity, bindings in data.items():
        if not isinstance(identity, str) or not isinstance(bindings, dict):
            return False
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in bindings.items()):
            return False
    return True


class JsonSnapshotStore:
    """
    identity → bindings のマッピングを 1 つの JSON ファイルとして扱うストア。
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RegistrySnapshot:
        """
        スナップショットを読み込む。

        ファイルが存在しない・読めない・形式が不正な場合は空のマッピングを返す。
        起動を止めないこと。
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No subscriber snapshot at %s, starting empty", self._path)
            return {}
        except OSError as exc:
            logger.warning("Unable to read subscriber snapshot %s: %s", self._path, exc)
            return {}

        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning("Corrupt subscriber snapshot %s: %s", self._path, exc)
            return {}

        if not _is_valid_snapshot(data):
            logger.warning("Unexpected subscriber snapshot format in %s, ignoring", self._path)
            return {}

        return {identity: dict(bindings) for identity, bindings in data.items()}

    def save(self, snapshot: RegistrySnapshot) -> None:
        """
        スナップショット全体を書き込み、以前の内容を置き換える。

        :raises SnapshotStoreError: 書き込みに失敗した場合。
        """
        text = json.dumps(snapshot, indent=2)
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=str(directory)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SnapshotStoreError(f"Unable to persist subscribers to {self._path}: {exc}") from exc
