# backend/tests/test_utils.py

import logging

import pytest

from lunchbell.menu.config import DEFAULT_TIMEZONE, get_menu_settings
from lunchbell.subscribers.config import get_registry_settings
from lunchbell.utils.config import EnvVarMissingError, get_env, get_env_int
from lunchbell.utils.logging_config import configure_logging


def test_get_env_required_missing_raises(monkeypatch) -> None:
    monkeypatch.delenv("LUNCHBELL_TEST_VAR", raising=False)

    with pytest.raises(EnvVarMissingError) as excinfo:
        get_env("LUNCHBELL_TEST_VAR")

    assert excinfo.value.name == "LUNCHBELL_TEST_VAR"


def test_get_env_empty_value_uses_default(monkeypatch) -> None:
    monkeypatch.setenv("LUNCHBELL_TEST_VAR", "")

    assert get_env("LUNCHBELL_TEST_VAR", default="fallback", required=False) == "fallback"


def test_get_env_int_parses_and_falls_back(monkeypatch, caplog) -> None:
    monkeypatch.setenv("LUNCHBELL_TEST_INT", "42")
    assert get_env_int("LUNCHBELL_TEST_INT", default=1) == 42

    monkeypatch.setenv("LUNCHBELL_TEST_INT", "forty-two")
    with caplog.at_level(logging.WARNING, logger="lunchbell.utils.config"):
        assert get_env_int("LUNCHBELL_TEST_INT", default=1) == 1
    assert any("LUNCHBELL_TEST_INT" in r.getMessage() for r in caplog.records)


def test_registry_settings_follow_environment(snapshot_path) -> None:
    # conftest が SUBSCRIBERS_FILE を tmp_path に向けている
    assert get_registry_settings().snapshot_path == str(snapshot_path)


def test_configure_logging_sets_root_level() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG
        configure_logging("not-a-level")
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)


def test_get_env_int_out_of_range_falls_back(monkeypatch, caplog) -> None:
    monkeypatch.setenv("LUNCHBELL_TEST_INT", "24")

    with caplog.at_level(logging.WARNING, logger="lunchbell.utils.config"):
        assert get_env_int("LUNCHBELL_TEST_INT", default=8, min_value=0, max_value=23) == 8
    assert any("Out of range" in r.getMessage() for r in caplog.records)

    monkeypatch.setenv("LUNCHBELL_TEST_INT", "0")
    assert get_env_int("LUNCHBELL_TEST_INT", default=8, min_value=0, max_value=23) == 0
    assert get_env_int("LUNCHBELL_TEST_INT", default=10, min_value=1) == 10


def test_menu_settings_fall_back_on_invalid_schedule(monkeypatch, caplog) -> None:
    monkeypatch.setenv("MENU_REFRESH_HOUR", "24")
    monkeypatch.setenv("MENU_REFRESH_MINUTE", "75")
    monkeypatch.setenv("MENU_REFRESH_TIMEZONE", "Mars/Olympus")
    get_menu_settings.cache_clear()

    with caplog.at_level(logging.WARNING):
        settings = get_menu_settings()

    assert settings.refresh_hour == 8
    assert settings.refresh_minute == 0
    assert settings.timezone == DEFAULT_TIMEZONE
    messages = [r.getMessage() for r in caplog.records]
    assert any("MENU_REFRESH_HOUR" in m for m in messages)
    assert any("MENU_REFRESH_MINUTE" in m for m in messages)
    assert any("MENU_REFRESH_TIMEZONE" in m for m in messages)
