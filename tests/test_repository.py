"""Tests for the SQLAlchemy-backed record repository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from datastore.database import create_database_engine
from datastore.repository import TemperatureRecordRepository
from services.pagination import PageRequest


@pytest.fixture()
def repository(tmp_path: Path) -> TemperatureRecordRepository:
    engine = create_database_engine(f"sqlite:///{tmp_path / 'records.db'}")
    repo = TemperatureRecordRepository(engine)
    repo.create_tables()
    yield repo
    engine.dispose()


def _page(size: int = 10, page_index: int = 0, sort_by: str = "created_at", descending: bool = True) -> PageRequest:
    return PageRequest(page_index=page_index, size=size, sort_by=sort_by, descending=descending)


def test_insert_assigns_identity_and_creation_time(repository: TemperatureRecordRepository) -> None:
    record = repository.insert("AB123", "lab", 12.3, datetime(2025, 1, 9, 7, 1))

    assert record is not None
    assert record.id is not None
    assert record.created_at is not None

    records, total = repository.find_page(_page())
    assert total == 1
    assert records[0].device_name == "AB123"
    assert records[0].location == "lab"
    assert records[0].temperature == pytest.approx(12.3)
    assert records[0].time == datetime(2025, 1, 9, 7, 1)


def test_duplicate_device_and_time_is_ignored(repository: TemperatureRecordRepository) -> None:
    reading_time = datetime(2025, 1, 9, 7, 1)

    first = repository.insert("AB123", "lab", 12.3, reading_time)
    second = repository.insert("AB123", "lab", 15.0, reading_time)

    assert first is not None
    assert second is None
    _, total = repository.find_page(_page())
    assert total == 1


def test_same_time_for_different_devices_is_kept(repository: TemperatureRecordRepository) -> None:
    reading_time = datetime(2025, 1, 9, 7, 1)

    assert repository.insert("AB123", "lab", 12.3, reading_time) is not None
    assert repository.insert("CD456", "lab", 13.3, reading_time) is not None


def test_readings_without_time_do_not_conflict(repository: TemperatureRecordRepository) -> None:
    assert repository.insert("AB123", "lab", 12.3, None) is not None
    assert repository.insert("AB123", "lab", 14.0, None) is not None

    _, total = repository.find_page(_page())
    assert total == 2


def test_window_query_is_half_open(repository: TemperatureRecordRepository) -> None:
    repository.insert("AB123", "lab", 10.0, datetime(2025, 1, 9, 6, 59, 59))
    repository.insert("AB123", "lab", 12.0, datetime(2025, 1, 9, 7, 0))
    repository.insert("AB123", "lab", 14.0, datetime(2025, 1, 9, 7, 59, 59))
    repository.insert("AB123", "lab", 16.0, datetime(2025, 1, 9, 8, 0))
    repository.insert("CD456", "lab", 99.0, datetime(2025, 1, 9, 7, 30))

    temperatures = repository.find_temperatures_in_window(
        "AB123", datetime(2025, 1, 9, 7, 0), datetime(2025, 1, 9, 8, 0)
    )

    assert sorted(temperatures) == [12.0, 14.0]


def test_window_query_skips_null_temperatures(repository: TemperatureRecordRepository) -> None:
    repository.insert("AB123", "lab", None, datetime(2025, 1, 9, 7, 10))
    repository.insert("AB123", "lab", 11.0, datetime(2025, 1, 9, 7, 20))

    temperatures = repository.find_temperatures_in_window(
        "AB123", datetime(2025, 1, 9, 7, 0), datetime(2025, 1, 9, 8, 0)
    )

    assert temperatures == [11.0]


def test_find_page_orders_limits_and_counts(repository: TemperatureRecordRepository) -> None:
    for minute in range(5):
        repository.insert("AB123", "lab", float(minute), datetime(2025, 1, 9, 7, minute))
    repository.insert("CD456", "hall", 30.0, datetime(2025, 1, 9, 7, 0))

    records, total = repository.find_page(
        _page(size=2, page_index=1, sort_by="time", descending=False), device_name="AB123"
    )

    assert total == 5
    assert [record.temperature for record in records] == [2.0, 3.0]


def test_find_page_defaults_to_newest_first(repository: TemperatureRecordRepository) -> None:
    repository.insert("AB123", "lab", 1.0, datetime(2025, 1, 9, 7, 0))
    repository.insert("AB123", "lab", 2.0, datetime(2025, 1, 9, 7, 1))

    records, _ = repository.find_page(_page())

    assert [record.temperature for record in records] == [2.0, 1.0]


def test_delete_all_removes_every_row(repository: TemperatureRecordRepository) -> None:
    repository.insert("AB123", "lab", 1.0, datetime(2025, 1, 9, 7, 0))
    repository.insert("CD456", "lab", 2.0, datetime(2025, 1, 9, 7, 0))

    deleted = repository.delete_all()

    assert deleted == 2
    records, total = repository.find_page(_page())
    assert records == []
    assert total == 0
