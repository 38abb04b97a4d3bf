"""
Request validators for booking creation.

Validators:
- validate_booking_request: Ordered validation of the POST /bookings body
- parse_taken_at: Lenient capture-time parsing (unparseable -> None)
"""

from bookings.validators.booking_validators import (
    VALIDATION_ERROR_CODES,
    BookingRequest,
    BookingValidationError,
    parse_taken_at,
    validate_booking_request,
)

__all__ = [
    "VALIDATION_ERROR_CODES",
    "BookingRequest",
    "BookingValidationError",
    "parse_taken_at",
    "validate_booking_request",
]
