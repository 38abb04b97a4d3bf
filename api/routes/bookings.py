"""Booking route handlers."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from api.dependencies import get_booking_transaction
from api.models.booking import BookingCreatedResponse, ErrorResponse
from bookings.transactions.booking_transaction import (
    FOREIGN_KEY_VIOLATION,
    BookingTransaction,
)
from bookings.validators.booking_validators import VALIDATION_ERROR_CODES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

CLIENT_ERROR_CODES = VALIDATION_ERROR_CODES | {FOREIGN_KEY_VIOLATION}


def _error_response(result: dict[str, Any]) -> JSONResponse:
    """Map a failed transaction result to its HTTP response."""
    error_code = result["error_code"]
    details = result.get("details") or {}
    content: dict[str, Any] = {"ok": False, "error": error_code}

    if error_code in CLIENT_ERROR_CODES:
        status_code = 400
        if error_code == FOREIGN_KEY_VIOLATION:
            content["detail"] = details.get("detail")
        elif details.get("field"):
            content["field"] = details["field"]
    else:
        # Never expose internal error details to clients
        status_code = 500
        content["error"] = "server_error"

    return JSONResponse(status_code=status_code, content=content)


@router.post(
    "",
    status_code=201,
    response_model=BookingCreatedResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_booking(
    request: Request,
    transaction: Annotated[BookingTransaction, Depends(get_booking_transaction)],
    payload: Annotated[dict[str, Any] | None, Body()] = None,
):
    """
    Create a check-in/check-out booking, with an optional photo.

    **Body:**
    ```json
    {
        "shift_id": 12,
        "type": "on",
        "lat": 40.4168,
        "lng": -3.7038,
        "photo_key": "bookings/1730000000000-k3j2h1x9q0a-photo.jpg",
        "taken_at": "2025-10-29T08:59:41Z"
    }
    ```

    **Errors:**
    - **400**: ``missing_required_field``, ``invalid_type``,
      ``invalid_coordinate``, ``invalid_shift_id``, ``invalid_photo_key``,
      ``foreign_key_violation``
    - **500**: ``server_error``
    """
    result = await transaction.execute(payload)

    if not result["success"]:
        logger.info(
            f"Booking rejected: {result['error_code']}",
            extra={"request_path": request.url.path, "error_code": result["error_code"]},
        )
        return _error_response(result)

    return {"ok": True, "booking": result["booking"]}
