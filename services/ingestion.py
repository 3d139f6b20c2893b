"""Batch ingestion of device readings onto a bounded worker pool."""

from __future__ import annotations

import logging
import re
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Callable, Dict, List, Optional, Sequence, Set
from uuid import uuid4

from app.schemas import TemperatureReadingIn
from datastore.repository import TemperatureRecordRepository
from models.records import TemperatureRecord

logger = logging.getLogger(__name__)

PersistListener = Callable[[TemperatureRecord], None]


# ISO-8601 extended local date-time; seconds and fraction are optional
_LOCAL_DATE_TIME = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"T(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2})"
    r"(?::(?P<second>[0-9]{2})(?:\.(?P<fraction>[0-9]{1,9}))?)?"
)


def parse_reading_time(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 local date-time such as ``2025-01-09T07:01:00``.

    Values with a UTC offset, without a time part or otherwise malformed are
    logged and yield ``None``. Fractions finer than microseconds are truncated.
    """
    if value is None:
        return None
    match = _LOCAL_DATE_TIME.fullmatch(value)
    parsed: Optional[datetime] = None
    if match is not None:
        fraction = (match.group("fraction") or "").ljust(6, "0")[:6]
        try:
            parsed = datetime(
                int(match.group("year")),
                int(match.group("month")),
                int(match.group("day")),
                int(match.group("hour")),
                int(match.group("minute")),
                int(match.group("second") or 0),
                int(fraction),
            )
        except ValueError:
            parsed = None
    if parsed is None:
        logger.error("Invalid date-time format: %s", value, extra={"reading_time": value})
    return parsed


def _missing_message(time: Optional[str]) -> str:
    return f"Missing reading at {time if time is not None else 'null'}"


@dataclass
class IngestionResult:
    batch_id: str
    missing_readings: Dict[str, str] = field(default_factory=dict)
    submitted: int = 0


class IngestionService:
    """Classifies missing readings and persists the rest in the background."""

    def __init__(
        self,
        repository: TemperatureRecordRepository,
        workers: int = 10,
    ) -> None:
        self.repository = repository
        self.executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingestion")
        self._batches: Dict[str, Set[Future[None]]] = {}
        self._batches_lock = Lock()
        self._listeners: List[PersistListener] = []

    def add_persist_listener(self, listener: PersistListener) -> None:
        self._listeners.append(listener)

    def process_records(self, records: Sequence[TemperatureReadingIn]) -> IngestionResult:
        """Report missing readings and queue every other reading for persistence.

        Returns as soon as the batch is classified; persistence completes
        asynchronously and can be awaited with :meth:`wait_for_batch`.
        """
        result = IngestionResult(batch_id=str(uuid4()))
        futures: List[Future[None]] = []

        for reading in records:
            if reading.temperature is None:
                # one message per device, the last one wins
                result.missing_readings[reading.device_name] = _missing_message(reading.time)
                continue
            futures.append(self.executor.submit(self._persist, result.batch_id, reading))

        result.submitted = len(futures)
        if futures:
            with self._batches_lock:
                self._batches[result.batch_id] = set(futures)
            for future in futures:
                future.add_done_callback(
                    lambda f, bid=result.batch_id: self._clear_future(bid, f)
                )

        logger.info(
            "Accepted ingestion batch",
            extra={
                "batch_id": result.batch_id,
                "record_count": len(records),
                "missing_count": len(result.missing_readings),
            },
        )
        return result

    def wait_for_batch(self, batch_id: str, timeout: Optional[float] = None) -> bool:
        """Block until every reading of ``batch_id`` is handled; ``False`` on timeout."""
        with self._batches_lock:
            futures = list(self._batches.get(batch_id, ()))
        if not futures:
            return True
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Block until all queued readings are handled; ``False`` on timeout."""
        with self._batches_lock:
            futures = [future for batch in self._batches.values() for future in batch]
        if not futures:
            return True
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def pending_count(self) -> int:
        with self._batches_lock:
            return sum(len(batch) for batch in self._batches.values())

    def shutdown(self) -> None:
        """Stop accepting work; queued readings that have not started are dropped."""
        self.executor.shutdown(wait=False, cancel_futures=True)

    def _clear_future(self, batch_id: str, future: Future[None]) -> None:
        with self._batches_lock:
            batch = self._batches.get(batch_id)
            if batch is None:
                return
            batch.discard(future)
            if not batch:
                del self._batches[batch_id]

    def _persist(self, batch_id: str, reading: TemperatureReadingIn) -> None:
        context = {
            "batch_id": batch_id,
            "device_name": reading.device_name,
            "reading_time": reading.time,
        }
        reading_time = parse_reading_time(reading.time)
        try:
            record = self.repository.insert(
                device_name=reading.device_name,
                location=reading.location,
                temperature=reading.temperature,
                time=reading_time,
            )
        except Exception:
            logger.exception("Failed to persist reading", extra=context)
            return

        if record is None:
            logger.warning(
                "Duplicate record skipped for device %s at time %s",
                reading.device_name,
                reading.time,
                extra=context,
            )
            return

        logger.debug("Persisted reading", extra=context)
        for listener in self._listeners:
            listener(record)
