"""
S3 object storage client for booking photos.

Photos never pass through the API: clients upload straight to S3 with a
pre-signed POST and later read them back through a short-lived signed URL.
This module wraps the two boto3 signing calls behind a small async interface.

Usage:
    from shared.storage_client import ObjectStorage

    storage = ObjectStorage.from_settings(get_settings())

    credential = await storage.generate_upload_credential(
        key="bookings/1730000000000-k3j2h1-photo.jpg",
        max_bytes=5_000_000,
        expires_in=60,
    )
    url = await storage.generate_read_url(key, expires_in=3600)
"""

import asyncio
import logging
from functools import partial
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """
    Raised when the object store cannot issue a credential or URL.

    Attributes:
        message: Error message
        original_error: boto exception that caused the failure
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class ObjectStorage:
    """Signed upload/read access to a single S3 bucket."""

    def __init__(self, bucket: str, client: Any):
        self.bucket = bucket
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        """Build a client from AWS_* settings (default credential chain if keys unset)."""
        client = boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            config=Config(signature_version="s3v4"),
        )
        return cls(bucket=settings.S3_BUCKET, client=client)

    async def _run(self, func, operation_name: str) -> Any:
        # boto3 is blocking (credential resolution may hit the network)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, func)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 {operation_name} failed: {e}")
            raise StorageError(f"S3 {operation_name} failed", original_error=e) from e

    async def generate_upload_credential(
        self,
        key: str,
        max_bytes: int,
        expires_in: int,
    ) -> dict[str, Any]:
        """
        Issue a pre-signed POST scoped to exactly ``key``.

        Args:
            key: Object key the client must upload to
            max_bytes: Maximum accepted payload size (content-length-range upper bound)
            expires_in: Credential lifetime in seconds

        Returns:
            dict with ``url`` and form ``fields`` as returned by S3

        Raises:
            StorageError: If boto3 fails to sign the policy
        """
        sign = partial(
            self._client.generate_presigned_post,
            Bucket=self.bucket,
            Key=key,
            Fields={"key": key},
            Conditions=[["content-length-range", 1, max_bytes]],
            ExpiresIn=expires_in,
        )
        presigned = await self._run(sign, "presigned POST")
        logger.info(
            f"Issued upload credential for {key} (ttl={expires_in}s, max={max_bytes}B)",
            extra={"photo_key": key},
        )
        return presigned

    async def generate_read_url(self, key: str | None, expires_in: int = 3600) -> str | None:
        """
        Return a time-limited GET URL for ``key``.

        Returns None without contacting S3 when no key is given.

        Raises:
            StorageError: If boto3 fails to sign the URL
        """
        if not key:
            return None

        sign = partial(
            self._client.generate_presigned_url,
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )
        return await self._run(sign, "presigned GET")
