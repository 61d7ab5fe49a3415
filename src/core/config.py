"""
Configuration and environment loading.

- Reads a `.env` file from the working directory if present, then environment variables.
- Only deployment knobs live here. Protocol constants (app tag, timeout bounds, Elo parameters)
  are module constants, as every observer replaying a log must agree on them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

from dotenv import load_dotenv

load_dotenv()


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    env = os.environ.get(name)
    if env is None:
        return default
    return cast(env) if cast else env


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    cache_enabled: bool
    cache_content_hash: bool


def load_settings() -> Settings:
    return Settings(
        database_url=_get("REVERSI_DATABASE_URL", "sqlite:///reversi.db"),
        log_level=_get("REVERSI_LOG_LEVEL", "INFO").upper(),
        cache_enabled=_get("REVERSI_CACHE_ENABLED", True, cast=_to_bool),
        cache_content_hash=_get("REVERSI_CACHE_CONTENT_HASH", False, cast=_to_bool),
    )


SETTINGS = load_settings()


def configure_logging(settings: Settings = SETTINGS) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
