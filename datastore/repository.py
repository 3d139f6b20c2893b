from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import List, Optional, Tuple

from sqlalchemy import Engine, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from datastore.database import build_default_engine, create_session_factory
from models.records import Base, TemperatureRecord
from services.pagination import PageRequest

logger = logging.getLogger(__name__)


class TemperatureRecordRepository:
    """Query and persistence operations for the ``temperature_records`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory: sessionmaker[Session] = create_session_factory(engine)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def insert(
        self,
        device_name: str,
        location: Optional[str],
        temperature: Optional[float],
        time: Optional[datetime],
    ) -> Optional[TemperatureRecord]:
        """Insert a reading, returning ``None`` when ``(device_name, time)`` already exists."""
        record = TemperatureRecord(
            device_name=device_name,
            location=location,
            temperature=temperature,
            time=time,
        )
        session = self._session_factory()
        try:
            session.add(record)
            session.commit()
        except IntegrityError:
            session.rollback()
            return None
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
        return record

    def find_temperatures_in_window(
        self, device_name: str, start: datetime, end: datetime
    ) -> List[float]:
        """Return non-null temperatures for ``device_name`` with ``start <= time < end``."""
        statement = select(TemperatureRecord.temperature).where(
            TemperatureRecord.device_name == device_name,
            TemperatureRecord.time >= start,
            TemperatureRecord.time < end,
            TemperatureRecord.temperature.is_not(None),
        )
        with self._session_factory() as session:
            return list(session.scalars(statement))

    def find_page(
        self, page_request: PageRequest, device_name: Optional[str] = None
    ) -> Tuple[List[TemperatureRecord], int]:
        """Return one page of records and the total number of matching rows."""
        filters = []
        if device_name is not None:
            filters.append(TemperatureRecord.device_name == device_name)

        sort_column = getattr(TemperatureRecord, page_request.sort_by)
        ordering = sort_column.desc() if page_request.descending else sort_column.asc()
        tiebreak = TemperatureRecord.id.desc() if page_request.descending else TemperatureRecord.id.asc()

        statement = (
            select(TemperatureRecord)
            .where(*filters)
            .order_by(ordering, tiebreak)
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        count_statement = select(func.count()).select_from(TemperatureRecord).where(*filters)

        with self._session_factory() as session:
            records = list(session.scalars(statement))
            total = session.execute(count_statement).scalar_one()
        return records, total

    def delete_all(self) -> int:
        with self._session_factory.begin() as session:
            result = session.execute(delete(TemperatureRecord))
        deleted = result.rowcount or 0
        logger.info("Deleted all temperature records", extra={"deleted_count": deleted})
        return deleted


@lru_cache
def build_default_repository(url: Optional[str] = None) -> TemperatureRecordRepository:
    repository = TemperatureRecordRepository(build_default_engine(url))
    repository.create_tables()
    return repository
