from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.ingestion",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Duplicate record skipped for device %s",
        args=("AB123",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context_keys() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    output = formatter.format(_record(device_name="AB123", batch_id="b-1", unrelated="x"))

    assert output == "WARNING Duplicate record skipped for device AB123 | batch_id=b-1 device_name=AB123"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(reading_time=None)) == "Duplicate record skipped for device AB123"


def test_formatter_honours_custom_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["page"])

    output = formatter.format(_record(page=2, device_name="AB123"))

    assert output.endswith("| page=2")
