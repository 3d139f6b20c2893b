from __future__ import annotations

from typing import Iterable

from datastore.database import build_default_engine
from datastore.repository import build_default_repository
from services.records import build_default_service
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


_CACHES = (
    get_settings,
    build_default_engine,
    build_default_repository,
    build_default_service,
)


def test_defaults_apply_without_environment(monkeypatch) -> None:
    for name in (
        "DATABASE_URL",
        "DATABASE_ECHO",
        "INGESTION_WORKER_COUNT",
        "INGESTION_AWAIT_PERSISTENCE",
        "MAX_PULL_SIZE",
        "AVERAGE_CACHE_ENABLED",
        "AVERAGE_CACHE_SIZE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.database_url == "sqlite:///./tmp/temperature_records.db"
        assert settings.database_echo is False
        assert settings.ingestion_workers == 10
        assert settings.ingestion_await_persistence is False
        assert settings.max_pull_size == 100
        assert settings.average_cache_size == 1024
        assert settings.average_cache_enabled is True
        assert settings.log_level == "INFO"
    finally:
        get_settings.cache_clear()


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("INGESTION_WORKER_COUNT", "-3")
    monkeypatch.setenv("MAX_PULL_SIZE", "lots")
    monkeypatch.setenv("AVERAGE_CACHE_ENABLED", "maybe")
    monkeypatch.setenv("AVERAGE_CACHE_SIZE", "0")
    monkeypatch.setenv("DATABASE_URL", "   ")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.ingestion_workers == 10
        assert settings.max_pull_size == 100
        assert settings.average_cache_size == 1024
        assert settings.average_cache_enabled is True
        assert settings.database_url == "sqlite:///./tmp/temperature_records.db"
    finally:
        get_settings.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    database_path = tmp_path / "nested" / "records.db"

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{database_path}")
    monkeypatch.setenv("INGESTION_WORKER_COUNT", "3")
    monkeypatch.setenv("INGESTION_AWAIT_PERSISTENCE", "yes")
    monkeypatch.setenv("MAX_PULL_SIZE", "25")
    monkeypatch.setenv("AVERAGE_CACHE_ENABLED", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    _clear_caches(_CACHES)

    service = build_default_service()

    try:
        settings = get_settings()
        assert settings.ingestion_await_persistence is True
        assert settings.log_level == "DEBUG"
        assert database_path.exists()
        assert service.ingestion.executor._max_workers == 3
        assert service.max_pull_size == 25
        assert service.average_cache is None
    finally:
        service.shutdown()
        service.repository.engine.dispose()
        _clear_caches(_CACHES)
