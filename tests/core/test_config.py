"""Unit tests for src/core/config.py"""

from unittest.mock import patch

import pytest

from src.core.config import configure_logging, load_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("REVERSI_DATABASE_URL", "REVERSI_LOG_LEVEL", "REVERSI_CACHE_ENABLED", "REVERSI_CACHE_CONTENT_HASH"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.database_url == "sqlite:///reversi.db"
    assert settings.log_level == "INFO"
    assert settings.cache_enabled is True
    assert settings.cache_content_hash is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REVERSI_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("REVERSI_LOG_LEVEL", "debug")
    monkeypatch.setenv("REVERSI_CACHE_ENABLED", "off")
    monkeypatch.setenv("REVERSI_CACHE_CONTENT_HASH", "Yes")
    settings = load_settings()
    assert settings.database_url == "sqlite://"
    assert settings.log_level == "DEBUG"
    assert settings.cache_enabled is False
    assert settings.cache_content_hash is True


def test_configure_logging_uses_configured_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REVERSI_LOG_LEVEL", "warning")
    with patch("src.core.config.logging.basicConfig") as basic_config:
        configure_logging(load_settings())
    assert basic_config.call_args.kwargs["level"] == "WARNING"
