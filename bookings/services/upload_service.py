"""
Upload credential issuer.

Clients upload booking photos directly to S3. Before uploading they ask for a
key and a pre-signed POST scoped to that key; after the upload succeeds they
send the key back with POST /bookings.

Keys look like ``bookings/1730000000000-k3j2h1x9q0a-photo.jpg``: epoch
milliseconds, a random base36 component and the client filename. The filename
is interpolated as given. Collisions are not checked; two uploads would need
the same millisecond and the same 11-character random string.
"""

import logging
import secrets
import string
import time
from typing import Any

from shared.config import Settings, get_settings
from shared.storage_client import ObjectStorage

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "photo.jpg"
DEFAULT_FILETYPE = "image/jpeg"

BASE36_ALPHABET = string.digits + string.ascii_lowercase
RANDOM_LENGTH = 11


def _random_base36(length: int = RANDOM_LENGTH) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def build_upload_key(filename: Any = None, prefix: str = "bookings/") -> str:
    """Return a fresh storage key for ``filename`` under ``prefix``."""
    filename = str(filename) if filename else DEFAULT_FILENAME
    timestamp_ms = time.time_ns() // 1_000_000
    return f"{prefix}{timestamp_ms}-{_random_base36()}-{filename}"


async def issue_upload_credential(
    storage: ObjectStorage,
    filename: Any = None,
    filetype: Any = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """
    Generate a key and a pre-signed upload credential for it.

    Args:
        storage: Object storage collaborator
        filename: Client filename (default "photo.jpg")
        filetype: Client MIME type hint (default "image/jpeg"); logged only
        settings: Upload limits and key prefix (defaults to get_settings())

    Returns:
        {"key": str, "presigned": {"url": str, "fields": dict}}

    Raises:
        StorageError: If S3 cannot sign the upload policy
    """
    settings = settings or get_settings()
    filetype = filetype or DEFAULT_FILETYPE

    key = build_upload_key(filename, prefix=settings.UPLOAD_KEY_PREFIX)
    logger.info(
        f"Issuing upload credential ({filetype})",
        extra={"photo_key": key},
    )

    presigned = await storage.generate_upload_credential(
        key=key,
        max_bytes=settings.UPLOAD_MAX_BYTES,
        expires_in=settings.UPLOAD_URL_TTL_SECONDS,
    )
    return {"key": key, "presigned": presigned}
