"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


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
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

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
class SyncSettings:
    """
    What to sync and how often.
    """

    origin: str | None = None
    page_size: int = 5
    schedule_enabled: bool = False
    schedule_interval_minutes: int = 60


@dataclass(frozen=True)
class RetrySettings:
    """
    Retry budget for upstream transport calls.
    """

    max_retries: int = 3
    base_delay_ms: int = 1000


@dataclass(frozen=True)
class GitHubSettings:
    """
    GitHub issues client settings.
    """

    base_url: str = "https://api.github.com"
    token: str | None = None
    timeout_seconds: float = 15.0
    rate_limit_per_second: float = 5.0
    user_agent: str = "record-sync/1.0"


@lru_cache(maxsize=1)
def get_sync_settings() -> SyncSettings:
    """
    Return cached sync settings from environment variables.
    """

    return SyncSettings(
        origin=_get_optional_str_env("SYNC_ORIGIN"),
        page_size=max(1, _get_int_env("SYNC_PAGE_SIZE", 5)),
        schedule_enabled=_get_bool_env("SYNC_SCHEDULE_ENABLED", False),
        schedule_interval_minutes=max(1, _get_int_env("SYNC_SCHEDULE_INTERVAL_MINUTES", 60)),
    )


@lru_cache(maxsize=1)
def get_retry_settings() -> RetrySettings:
    """
    Return cached retry settings; negative values are clamped to zero.
    """

    return RetrySettings(
        max_retries=max(0, _get_int_env("SYNC_MAX_RETRIES", 3)),
        base_delay_ms=max(0, _get_int_env("SYNC_RETRY_BASE_DELAY_MS", 1000)),
    )


@lru_cache(maxsize=1)
def get_github_settings() -> GitHubSettings:
    """
    Return cached GitHub client settings from environment variables.
    """

    return GitHubSettings(
        base_url=_get_str_env("GITHUB_API_BASE_URL", "https://api.github.com").rstrip("/"),
        token=_get_optional_str_env("GITHUB_TOKEN"),
        timeout_seconds=max(1.0, _get_float_env("GITHUB_HTTP_TIMEOUT_SECONDS", 15.0)),
        rate_limit_per_second=max(0.0, _get_float_env("GITHUB_RATE_LIMIT_PER_SECOND", 5.0)),
        user_agent=_get_str_env("GITHUB_USER_AGENT", "record-sync/1.0"),
    )
