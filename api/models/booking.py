"""Pydantic models for booking and photo upload payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class PresignRequest(BaseModel):
    """
    Body of POST /photos/presign (both fields optional).

    Values are not validated: the filename is interpolated into the key as
    given (numbers included) and the filetype is only logged.
    """
    model_config = ConfigDict(extra="ignore")

    filename: Any = None
    filetype: Any = None


class PresignedPost(BaseModel):
    """S3 pre-signed POST: form action URL and the fields to submit with the file."""

    url: str
    fields: dict[str, Any]


class PresignResponse(BaseModel):
    """Storage key plus the credential to upload it."""

    key: str
    presigned: PresignedPost


class BookingOut(BaseModel):
    """Persisted booking as returned to clients."""

    id: int
    shift_id: int
    type: str  # on|off
    lat: float | None = None
    lng: float | None = None
    photo_id: int | None = None
    photo_key: str | None = None
    captured_at: str  # ISO 8601
    photo_url: str | None = None


class BookingCreatedResponse(BaseModel):
    """201 response of POST /bookings."""

    ok: bool = True
    booking: BookingOut


class ErrorResponse(BaseModel):
    """Error body shared by all endpoints."""

    ok: bool = False
    error: str
    field: str | None = None
    detail: str | None = None
