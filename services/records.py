"""Service layer combining ingestion, aggregation and record queries."""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date
from functools import lru_cache
from threading import Lock
from typing import Dict, List, Optional, Sequence, Tuple

from app.schemas import (
    PageableRequest,
    TemperatureReadingIn,
    TemperatureReadingOut,
    TemperatureRecordList,
)
from datastore.repository import TemperatureRecordRepository, build_default_repository
from models.records import TemperatureRecord
from services.aggregator import Aggregator, hour_window
from services.ingestion import IngestionService
from services.pagination import PageRequest, build_page_request
from settings import get_settings

logger = logging.getLogger(__name__)

AverageKey = Tuple[str, date, int]


def to_transport(record: TemperatureRecord) -> TemperatureReadingOut:
    return TemperatureReadingOut(
        device_name=record.device_name,
        location=record.location,
        temperature=record.temperature,
        time=record.time.isoformat() if record.time is not None else None,
        actual_time=record.time,
    )


class AverageCache:
    """Bounded LRU of averages per device/date/hour, cleared whenever data changes.

    Every :meth:`clear` starts a new generation. A value computed under an
    older generation is dropped by :meth:`put_if_current`.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self.maxsize = maxsize
        self._values: OrderedDict[AverageKey, float] = OrderedDict()
        self._generation = 0
        self._lock = Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self, key: AverageKey) -> Optional[float]:
        with self._lock:
            value = self._values.get(key)
            if value is not None:
                self._values.move_to_end(key)
            return value

    def put_if_current(self, key: AverageKey, value: float, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                return False
            self._values[key] = value
            self._values.move_to_end(key)
            while len(self._values) > self.maxsize:
                self._values.popitem(last=False)
            return True

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._generation += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


class TemperatureRecordService:
    def __init__(
        self,
        repository: TemperatureRecordRepository,
        ingestion: IngestionService,
        aggregator: Aggregator,
        max_pull_size: int = 100,
        average_cache: Optional[AverageCache] = None,
    ) -> None:
        self.repository = repository
        self.ingestion = ingestion
        self.aggregator = aggregator
        self.max_pull_size = max_pull_size
        self.average_cache = average_cache
        if average_cache is not None:
            ingestion.add_persist_listener(lambda _record: average_cache.clear())

    def process_records(
        self,
        records: Sequence[TemperatureReadingIn],
        wait: bool = False,
        timeout: Optional[float] = None,
    ) -> Dict[str, str]:
        """Ingest a batch and return device name -> missing reading message.

        With ``wait`` the call blocks until the batch's readings are stored.
        """
        result = self.ingestion.process_records(records)
        if wait and not self.ingestion.wait_for_batch(result.batch_id, timeout=timeout):
            logger.warning(
                "Timed out waiting for batch persistence",
                extra={"batch_id": result.batch_id},
            )
        return result.missing_readings

    def calculate_average_temperature(self, device_name: str, day: date, hour: int) -> float:
        start, end = hour_window(day, hour)
        key = (device_name, day, hour)
        if self.average_cache is not None:
            generation = self.average_cache.generation
            cached = self.average_cache.get(key)
            if cached is not None:
                return cached

        logger.info(
            "Calculating average between %s and %s",
            start.isoformat(),
            end.isoformat(),
            extra={"device_name": device_name},
        )
        temperatures = self.repository.find_temperatures_in_window(device_name, start, end)
        average = self.aggregator.average(temperatures)

        if self.average_cache is not None:
            self.average_cache.put_if_current(key, average, generation)
        return average

    def get_all_records(self, request: PageableRequest) -> TemperatureRecordList:
        page_request = build_page_request(request, self.max_pull_size)
        records, total = self.repository.find_page(page_request)
        return self._to_record_list(page_request, records, total)

    def get_records_by_device_name(
        self, device_name: str, request: PageableRequest
    ) -> TemperatureRecordList:
        page_request = build_page_request(request, self.max_pull_size)
        records, total = self.repository.find_page(page_request, device_name=device_name)
        return self._to_record_list(page_request, records, total)

    def delete_all_records(self) -> int:
        deleted = self.repository.delete_all()
        if self.average_cache is not None:
            self.average_cache.clear()
        return deleted

    def shutdown(self) -> None:
        self.ingestion.shutdown()

    @staticmethod
    def _to_record_list(
        page_request: PageRequest, records: List[TemperatureRecord], total: int
    ) -> TemperatureRecordList:
        record_list = TemperatureRecordList(
            temperature_records=[to_transport(record) for record in records]
        )
        # metadata is only reported for non-empty pages
        if records:
            record_list.has_next_record = (page_request.offset + page_request.size) < total
            record_list.total_count = total
            record_list.size = len(records)
            record_list.page = page_request.page_index + 1
        return record_list


@lru_cache
def build_default_service(workers: Optional[int] = None) -> TemperatureRecordService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    repository = build_default_repository()
    ingestion = IngestionService(repository, workers=workers or settings.ingestion_workers)
    cache = None
    if settings.average_cache_enabled:
        cache = AverageCache(maxsize=settings.average_cache_size)
    return TemperatureRecordService(
        repository=repository,
        ingestion=ingestion,
        aggregator=Aggregator(),
        max_pull_size=settings.max_pull_size,
        average_cache=cache,
    )
