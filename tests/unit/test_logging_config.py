"""Unit tests for the structured JSON log formatter."""

import json
import logging
import sys

from shared.logging_config import JSONFormatter


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bookings.transactions.booking_transaction",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_base_fields():
    data = json.loads(JSONFormatter().format(_record("Booking committed")))

    assert data["level"] == "INFO"
    assert data["logger"] == "bookings.transactions.booking_transaction"
    assert data["message"] == "Booking committed"
    assert "timestamp" in data


def test_extra_fields_included():
    record = _record("Booking committed", trace_id="booking_abc", booking_id=12, shift_id=3)
    data = json.loads(JSONFormatter().format(record))

    assert data["trace_id"] == "booking_abc"
    assert data["booking_id"] == 12
    assert data["shift_id"] == 3
    assert "photo_key" not in data


def test_exception_formatted():
    try:
        raise RuntimeError("store down")
    except RuntimeError:
        record = _record("failed")
        record.exc_info = sys.exc_info()

    data = json.loads(JSONFormatter().format(record))

    assert "RuntimeError: store down" in data["exception"]
