"""Photo upload route handlers."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_storage
from api.models.booking import ErrorResponse, PresignRequest, PresignResponse
from bookings.services.upload_service import issue_upload_credential
from shared.storage_client import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post(
    "/presign",
    response_model=PresignResponse,
    responses={500: {"model": ErrorResponse}},
)
async def presign_photo_upload(
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    payload: PresignRequest | None = None,
):
    """
    Issue a storage key and a pre-signed POST for uploading a booking photo.

    The client uploads the file directly to S3 with ``presigned.url`` and
    ``presigned.fields``, then sends ``key`` as ``photo_key`` to POST /bookings.

    **Errors:**
    - **500**: ``presign_failed`` when S3 cannot sign the upload
    """
    payload = payload or PresignRequest()

    try:
        return await issue_upload_credential(
            storage,
            filename=payload.filename,
            filetype=payload.filetype,
        )
    except StorageError as e:
        logger.error(f"presign error: {e.message}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "presign_failed"},
        )
