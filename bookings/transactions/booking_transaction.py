"""
Booking Transaction Handler.

This module implements booking creation:
- Request validation (required fields, type, coordinates) before any write
- Photo + booking rows written in one database transaction
- Signed photo URL generated AFTER commit (non-transactional, degrades to None)

The BookingTransaction.execute() method is the single entry point for creating
bookings. It's called by the POST /bookings route in api/routes/bookings.py.
"""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from bookings.validators.booking_validators import (
    BookingValidationError,
    validate_booking_request,
)
from database.connection import Database
from database.errors import ForeignKeyViolationError
from database.models import Booking, Photo
from shared.storage_client import ObjectStorage

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "foreign_key_violation"
SERVER_ERROR = "server_error"


class BookingTransaction:
    """
    Atomic transaction handler for creating bookings.

    This class encapsulates the complete booking flow:
    1. Validate the request payload (fail fast, no transaction opened)
    2. Insert the photo row when a photo_key is supplied
    3. Insert the booking row referencing it
    4. Commit, or roll back everything if any step fails
    5. Sign a read URL for the photo (after commit)

    Collaborators are injected at application startup and shared by all
    requests; each call takes its own session from the pool.
    """

    def __init__(
        self,
        database: Database,
        storage: ObjectStorage,
        read_url_ttl: int = 3600,
    ):
        self.database = database
        self.storage = storage
        self.read_url_ttl = read_url_ttl

    async def execute(self, payload: dict[str, Any] | None) -> dict[str, Any]:
        """
        Execute the booking transaction.

        Args:
            payload: Decoded request body with shift_id, type, lat, lng,
                photo_key (optional) and taken_at (optional)

        Returns:
            Dict with booking result. Structure:

            Success:
                {
                    "success": True,
                    "booking": {
                        "id": int,
                        "shift_id": int,
                        "type": "on" | "off",
                        "lat": float | None,
                        "lng": float | None,
                        "photo_id": int | None,
                        "photo_key": str | None,
                        "captured_at": str,
                        "photo_url": str | None
                    }
                }

            Failure:
                {
                    "success": False,
                    "error_code": str,
                    "error_message": str,
                    "details": dict
                }

        Example:
            >>> result = await transaction.execute({"shift_id": 12, "type": "on"})
            >>> if result["success"]:
            ...     booking_id = result["booking"]["id"]
        """
        trace_id = f"booking_{uuid4().hex[:12]}"
        logger.info(
            f"[{trace_id}] Starting booking transaction",
            extra={"trace_id": trace_id},
        )

        # Step 1: Validate request (no transaction yet)
        try:
            request = validate_booking_request(payload)
        except BookingValidationError as e:
            logger.warning(
                f"[{trace_id}] Booking validation failed: {e.error_code} ({e.field})",
                extra={"trace_id": trace_id, "error_code": e.error_code},
            )
            return {
                "success": False,
                "error_code": e.error_code,
                "error_message": e.message,
                "details": {"field": e.field},
            }

        captured_at = request.taken_at or datetime.now(UTC)

        # Step 2: Photo + booking rows, all-or-nothing
        try:
            async with self.database.transaction() as session:
                photo = None
                if request.photo_key:
                    photo = Photo(s3_key=request.photo_key)
                    session.add(photo)
                    await session.flush()  # Flush to get ID, commit happens with the booking

                    logger.info(
                        f"[{trace_id}] Photo row created",
                        extra={"trace_id": trace_id, "photo_id": photo.id},
                    )

                booking = Booking(
                    shift_id=request.shift_id,
                    type=request.type,
                    lat=request.lat,
                    lng=request.lng,
                    photo_id=photo.id if photo else None,
                    captured_at=captured_at,
                )
                session.add(booking)
                await session.flush()

        except ForeignKeyViolationError as e:
            logger.warning(
                f"[{trace_id}] Foreign key violation, transaction rolled back: {e.detail}",
                extra={"trace_id": trace_id, "shift_id": request.shift_id},
            )
            return {
                "success": False,
                "error_code": FOREIGN_KEY_VIOLATION,
                "error_message": "Referenced record does not exist",
                "details": {"detail": e.detail, "constraint": e.constraint},
            }

        except Exception as e:
            logger.error(
                f"[{trace_id}] Booking transaction failed, rolled back: {e}",
                extra={"trace_id": trace_id, "shift_id": request.shift_id},
                exc_info=True,
            )
            return {
                "success": False,
                "error_code": SERVER_ERROR,
                "error_message": "Unexpected error while creating the booking",
                "details": {},
            }

        logger.info(
            f"[{trace_id}] Booking committed",
            extra={
                "trace_id": trace_id,
                "booking_id": booking.id,
                "shift_id": booking.shift_id,
            },
        )

        # Step 3: Signed photo URL (booking is already committed)
        photo_url = None
        if photo is not None:
            photo_url = await self._photo_url(photo.s3_key, trace_id)

        return {
            "success": True,
            "booking": {
                "id": booking.id,
                "shift_id": booking.shift_id,
                "type": str(booking.type),
                "lat": booking.lat,
                "lng": booking.lng,
                "photo_id": booking.photo_id,
                "photo_key": photo.s3_key if photo else None,
                "captured_at": booking.captured_at.isoformat(),
                "photo_url": photo_url,
            },
        }

    async def _photo_url(self, key: str, trace_id: str) -> str | None:
        """Sign a read URL; failures are logged and yield None."""
        try:
            return await self.storage.generate_read_url(key, expires_in=self.read_url_ttl)
        except Exception as e:
            logger.warning(
                f"[{trace_id}] Could not sign photo URL (booking still valid): {e}",
                extra={"trace_id": trace_id, "photo_key": key},
            )
            return None
