"""Aggregation logic for temperature readings."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, Tuple

from app.errors import GeneralError, ResponseCode

WINDOW_LENGTH = timedelta(hours=1)


def hour_window(day: date, hour: int) -> Tuple[datetime, datetime]:
    """Return the half-open window ``[day hour:00, day hour:00 + 1h)``."""
    if not 0 <= hour <= 23:
        raise GeneralError(ResponseCode.BAD_REQUEST.code, "Hour must be between 0 and 23")
    start = datetime.combine(day, time(hour=hour))
    return start, start + WINDOW_LENGTH


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def average(self, temperatures: Iterable[float]) -> float:
        """Arithmetic mean of ``temperatures``; ``nan`` when there are none."""
        total = 0.0
        count = 0
        for value in temperatures:
            total += value
            count += 1
        if not count:
            return math.nan
        return total / count
