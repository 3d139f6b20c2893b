"""ORM models shared across services."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class TemperatureRecord(Base):
    """A single temperature reading reported by a device.

    ``time`` is the client-supplied local measurement time (no timezone) and
    may be null when the submitted value could not be parsed. ``created_at``
    is assigned on insert and never updated.
    """

    __tablename__ = "temperature_records"
    __table_args__ = (
        Index("idx_temperaturerecord_device_name", "device_name"),
        Index("idx_temperaturerecord_location", "location"),
        UniqueConstraint("device_name", "time", name="uq_temperature_records_device_time"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    time: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:
        return (
            f"TemperatureRecord(id={self.id!r}, device_name={self.device_name!r}, "
            f"time={self.time!r}, temperature={self.temperature!r})"
        )
