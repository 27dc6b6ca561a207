from __future__ import annotations

import logging

import pytest

from cardvault_backend import config as config_module
from cardvault_backend.config import AppConfig, DealerSettings, load_config
from cardvault_backend.utils.logging_utils import resolve_level


def test_owner_comes_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARDVAULT_OWNER", "dealer-gateway")
    settings = DealerSettings()

    assert settings.owner == "dealer-gateway"
    assert settings.owner_configured


def test_owner_default_is_flagged(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CARDVAULT_OWNER", raising=False)
    settings = DealerSettings()

    assert settings.owner == config_module.DEFAULT_OWNER
    assert not settings.owner_configured


def test_cors_origins_are_split(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    assert load_config().cors.allowed_origins == ["https://a.example", "https://b.example"]


def test_log_level_falls_back_to_configured_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "cardvault_backend.utils.logging_utils.config",
        AppConfig(log_level="DEBUG"),
    )

    assert resolve_level("warning") == logging.WARNING
    assert resolve_level(None) == logging.DEBUG
    assert resolve_level("verbose") == logging.DEBUG
