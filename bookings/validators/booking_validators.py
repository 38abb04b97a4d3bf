"""
Request validators for booking creation.

Turns the untyped JSON body of POST /bookings into a BookingRequest or raises
BookingValidationError naming the failed field. Checks run in a fixed order
and stop at the first failure:

1. shift_id and type present           -> missing_required_field
2. type is "on" or "off"               -> invalid_type
3. lat, then lng, finite if present    -> invalid_coordinate
4. shift_id is an integer id in range  -> invalid_shift_id
5. photo_key is a string or a number   -> invalid_photo_key

taken_at is never rejected: an unparseable value is dropped and the
transaction falls back to the server time.
"""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from dateutil.parser import ParserError
from dateutil.parser import parse as parse_datetime

from database.models import BookingType

logger = logging.getLogger(__name__)

MISSING_REQUIRED_FIELD = "missing_required_field"
INVALID_TYPE = "invalid_type"
INVALID_COORDINATE = "invalid_coordinate"
INVALID_SHIFT_ID = "invalid_shift_id"
INVALID_PHOTO_KEY = "invalid_photo_key"

VALIDATION_ERROR_CODES = frozenset(
    {
        MISSING_REQUIRED_FIELD,
        INVALID_TYPE,
        INVALID_COORDINATE,
        INVALID_SHIFT_ID,
        INVALID_PHOTO_KEY,
    }
)

# shifts.id is a 32-bit INTEGER column
SHIFT_ID_MIN = 1
SHIFT_ID_MAX = 2**31 - 1

ERROR_MESSAGES = {
    MISSING_REQUIRED_FIELD: "shift_id and type are required",
    INVALID_TYPE: "type must be 'on' or 'off'",
    INVALID_COORDINATE: "lat and lng must be finite numbers",
    INVALID_SHIFT_ID: f"shift_id must be an integer between {SHIFT_ID_MIN} and {SHIFT_ID_MAX}",
    INVALID_PHOTO_KEY: "photo_key must be a string",
}


class BookingValidationError(Exception):
    """Raised when a booking request fails validation."""

    def __init__(self, error_code: str, field: str):
        self.error_code = error_code
        self.field = field
        self.message = ERROR_MESSAGES[error_code]
        super().__init__(f"{field}: {self.message}")


@dataclass(frozen=True)
class BookingRequest:
    """Validated booking-creation input."""

    shift_id: int
    type: BookingType
    lat: float | None = None
    lng: float | None = None
    photo_key: str | None = None
    taken_at: datetime | None = None


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_coordinate(value: Any, field: str) -> float | None:
    """
    Coerce a coordinate to float.

    None stays None. Numbers and numeric strings ("12.5") are accepted;
    booleans, non-numeric strings, NaN and infinities are rejected.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise BookingValidationError(INVALID_COORDINATE, field)

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise BookingValidationError(INVALID_COORDINATE, field) from None
    else:
        raise BookingValidationError(INVALID_COORDINATE, field)

    if not math.isfinite(number):
        raise BookingValidationError(INVALID_COORDINATE, field)
    return number


def _shift_id_value(value: Any) -> int:
    if isinstance(value, bool):
        raise BookingValidationError(INVALID_SHIFT_ID, "shift_id")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise BookingValidationError(INVALID_SHIFT_ID, "shift_id") from None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise BookingValidationError(INVALID_SHIFT_ID, "shift_id")


def parse_shift_id(value: Any) -> int:
    """Accept an int or an integer-valued string within the shifts.id range."""
    shift_id = _shift_id_value(value)
    if not SHIFT_ID_MIN <= shift_id <= SHIFT_ID_MAX:
        raise BookingValidationError(INVALID_SHIFT_ID, "shift_id")
    return shift_id


def parse_taken_at(value: Any) -> datetime | None:
    """
    Parse a client capture time, returning None when it cannot be used.

    Naive timestamps are interpreted as UTC.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        logger.info(f"Ignoring taken_at of type {type(value).__name__}")
        return None

    try:
        parsed = parse_datetime(value)
    except (ParserError, ValueError, OverflowError):
        logger.info(f"Ignoring unparseable taken_at: {value!r}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_photo_key(value: Any) -> str | None:
    """
    Normalise the optional photo reference.

    Empty values (None, blank strings, 0, False) mean "no photo". Strings are
    kept as given and numbers are stored in their string form; any other
    type is rejected rather than dropped.
    """
    if value is None or value is False or value == 0:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise BookingValidationError(INVALID_PHOTO_KEY, "photo_key")


def validate_booking_request(payload: dict[str, Any] | None) -> BookingRequest:
    """
    Validate a raw booking payload.

    Args:
        payload: Decoded JSON body (None is treated as an empty object)

    Returns:
        BookingRequest with coerced values

    Raises:
        BookingValidationError: On the first failed check, carrying the
            error code and the offending field

    Example:
        >>> validate_booking_request({"shift_id": 7, "type": "on", "lat": "12.5"})
        BookingRequest(shift_id=7, type=<BookingType.ON: 'on'>, lat=12.5, ...)
    """
    payload = payload or {}

    shift_id = payload.get("shift_id")
    booking_type = payload.get("type")

    # Step 1: required fields
    if _is_missing(shift_id):
        raise BookingValidationError(MISSING_REQUIRED_FIELD, "shift_id")
    if _is_missing(booking_type):
        raise BookingValidationError(MISSING_REQUIRED_FIELD, "type")

    # Step 2: enumerated type
    if booking_type not in (BookingType.ON.value, BookingType.OFF.value):
        raise BookingValidationError(INVALID_TYPE, "type")

    # Step 3: coordinates
    lat = parse_coordinate(payload.get("lat"), "lat")
    lng = parse_coordinate(payload.get("lng"), "lng")

    # Step 4: shift reference format
    parsed_shift_id = parse_shift_id(shift_id)

    # Step 5: photo reference
    photo_key = parse_photo_key(payload.get("photo_key"))

    return BookingRequest(
        shift_id=parsed_shift_id,
        type=BookingType(booking_type),
        lat=lat,
        lng=lng,
        photo_key=photo_key,
        taken_at=parse_taken_at(payload.get("taken_at")),
    )
