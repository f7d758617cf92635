# backend/lunchbell/subscribers/config.py

from dataclasses import dataclass
from functools import lru_cache

from lunchbell.utils.config import get_env


@dataclass(frozen=True)
class RegistrySettings:
    """購読者スナップショットの保存先。"""

    snapshot_path: str = "./users.json"


@lru_cache()
def get_registry_settings() -> RegistrySettings:
    """
    任意:
      - SUBSCRIBERS_FILE（デフォルト ./users.json）
    """
    return RegistrySettings(
        snapshot_path=get_env("SUBSCRIBERS_FILE", default="./users.json", required=False),
    )
