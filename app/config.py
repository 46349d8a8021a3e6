"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

from app.errors import ConfigurationError


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class AppSettings:
    """
    Process-wide settings shared by CLI scripts and the API.
    """

    log_level: str = "INFO"


@dataclass(frozen=True)
class PublisherSettings:
    """
    Delivery settings for the spreadsheet ingestion endpoint.

    ``max_retries`` only applies to HTTP 429 responses; every other failure
    is terminal for the row.
    """

    app_script_url: str | None = None
    post_delay_seconds: float = 0.5
    max_retries: int = 3
    retry_delay_seconds: float = 2.0
    timeout_seconds: float = 30.0
    dry_run: bool = False

    def require_url(self) -> str:
        if not self.app_script_url:
            raise ConfigurationError("GOOGLE_SHEET_APP_SCRIPT_URL is not set.")
        return self.app_script_url


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings.
    """

    return AppSettings(log_level=_get_str_env("VISIBILITY_LOG_LEVEL", "INFO").upper())


@lru_cache(maxsize=1)
def get_publisher_settings() -> PublisherSettings:
    """
    Return cached publisher settings from environment variables.
    """

    return PublisherSettings(
        app_script_url=_get_optional_str_env("GOOGLE_SHEET_APP_SCRIPT_URL"),
        post_delay_seconds=max(0.0, _get_float_env("VISIBILITY_POST_DELAY_SECONDS", 0.5)),
        max_retries=max(0, _get_int_env("VISIBILITY_POST_MAX_RETRIES", 3)),
        retry_delay_seconds=max(0.0, _get_float_env("VISIBILITY_POST_RETRY_DELAY_SECONDS", 2.0)),
        timeout_seconds=max(1.0, _get_float_env("VISIBILITY_POST_TIMEOUT_SECONDS", 30.0)),
        dry_run=_get_bool_env("VISIBILITY_POST_DRY_RUN", False),
    )


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Daily visibility run inside the API process.
    """

    enabled: bool = False
    hour: int = 2
    minute: int = 0
    mode: str | None = None


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.
    """

    hour = _get_int_env("VISIBILITY_SCHEDULE_HOUR", 2)
    minute = _get_int_env("VISIBILITY_SCHEDULE_MINUTE", 0)
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ConfigurationError(
            f"Invalid visibility schedule {hour:02d}:{minute:02d}; expected HH in 0-23 and MM in 0-59."
        )
    return SchedulerSettings(
        enabled=_get_bool_env("VISIBILITY_SCHEDULE_ENABLED", False),
        hour=hour,
        minute=minute,
        mode=_get_optional_str_env("VISIBILITY_SCHEDULE_MODE"),
    )
