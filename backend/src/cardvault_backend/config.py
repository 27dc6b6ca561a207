"""Configuration management with environment variable support."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


DEFAULT_OWNER = "operator"


def _parse_cors_origins() -> list[str]:
    origins = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in origins.split(",") if o.strip()]


@dataclass(frozen=True)
class DealerSettings:
    """Operator identity allowed to start hands and reveal cards."""

    owner: str = field(default_factory=lambda: os.getenv("CARDVAULT_OWNER", DEFAULT_OWNER))
    owner_configured: bool = field(default_factory=lambda: "CARDVAULT_OWNER" in os.environ)


@dataclass(frozen=True)
class CORSConfig:
    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class AppConfig:
    dealer: DealerSettings = field(default_factory=DealerSettings)
    cors: CORSConfig = field(default_factory=CORSConfig)
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


def load_config() -> AppConfig:
    return AppConfig()


config = load_config()
