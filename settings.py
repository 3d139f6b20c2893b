from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_DATABASE_URL_ENV = "DATABASE_URL"
_DATABASE_ECHO_ENV = "DATABASE_ECHO"
_WORKER_COUNT_ENV = "INGESTION_WORKER_COUNT"
_AWAIT_PERSISTENCE_ENV = "INGESTION_AWAIT_PERSISTENCE"
_MAX_PULL_SIZE_ENV = "MAX_PULL_SIZE"
_AVERAGE_CACHE_ENV = "AVERAGE_CACHE_ENABLED"
_AVERAGE_CACHE_SIZE_ENV = "AVERAGE_CACHE_SIZE"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_echo: bool
    ingestion_workers: int
    ingestion_await_persistence: bool
    max_pull_size: int
    average_cache_enabled: bool
    average_cache_size: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=_read_str_env(_DATABASE_URL_ENV, "sqlite:///./tmp/temperature_records.db"),
        database_echo=_read_bool(_DATABASE_ECHO_ENV, False),
        ingestion_workers=_read_positive_int(_WORKER_COUNT_ENV, 10),
        ingestion_await_persistence=_read_bool(_AWAIT_PERSISTENCE_ENV, False),
        max_pull_size=_read_positive_int(_MAX_PULL_SIZE_ENV, 100),
        average_cache_enabled=_read_bool(_AVERAGE_CACHE_ENV, True),
        average_cache_size=_read_positive_int(_AVERAGE_CACHE_SIZE_ENV, 1024),
        log_level=_read_log_level("INFO"),
    )
