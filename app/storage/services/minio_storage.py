"""
MinIO-backed object storage.

Stores audio objects in a single MinIO bucket. Remote references have the
form ``bucket/object_name``.
"""

from __future__ import annotations

import io
from datetime import timedelta

from loguru import logger

from tunevault_core.config import settings
from tunevault_core.domain.storage import BackendKind
from tunevault_core.infrastructure.minio import get_minio_client

# S3 presigned URLs cannot outlive seven days
MAX_PRESIGN_SECONDS = 7 * 24 * 3600


class MinIOStorage:
    """
    MinIO-based storage for production deployments.

    Implements the StorageBackend protocol.

    Usage:
        storage = MinIOStorage()
        ref = storage.put("user-1/obj-1", content, "audio/mpeg")
        content = storage.get(ref)
    """

    kind = BackendKind.MINIO

    def __init__(self, bucket: str | None = None):
        """Initialize the MinIO storage service."""
        self._client = get_minio_client()
        self.bucket = bucket or settings.MINIO_BUCKET_AUDIO

        self.ensure_bucket_exists(self.bucket)

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """Create bucket if it doesn't exist."""
        try:
            if not self._client.bucket_exists(bucket_name):
                self._client.make_bucket(bucket_name)
                logger.info(f"Created MinIO bucket '{bucket_name}'")
        except Exception as e:
            logger.warning(f"Could not ensure bucket '{bucket_name}' exists: {e}")

    def put(self, key: str, content: bytes, content_type: str) -> str:
        """
        Upload content to MinIO.

        Returns:
            str: The remote reference (bucket/key).
        """
        logger.info(f"Uploading {len(content)} bytes to {self.bucket}/{key}")

        self._client.put_object(
            bucket_name=self.bucket,
            object_name=key,
            data=io.BytesIO(content),
            length=len(content),
            content_type=content_type,
        )

        return f"{self.bucket}/{key}"

    def get(self, remote_ref: str) -> bytes:
        """
        Download an object from MinIO.

        Raises:
            minio.error.S3Error: If the object does not exist.
        """
        bucket_name, object_name = self._split(remote_ref)

        logger.info(f"Downloading {remote_ref}")

        response = self._client.get_object(bucket_name, object_name)
        try:
            content = response.read()
        finally:
            response.close()
            response.release_conn()

        return content

    def delete(self, remote_ref: str) -> None:
        bucket_name, object_name = self._split(remote_ref)

        logger.info(f"Deleting {remote_ref}")
        self._client.remove_object(bucket_name, object_name)

    def signed_url(self, remote_ref: str, ttl_seconds: int) -> str:
        """Presign a GET URL. TTL is clamped to the S3 maximum of seven days."""
        bucket_name, object_name = self._split(remote_ref)
        ttl = max(1, min(ttl_seconds, MAX_PRESIGN_SECONDS))
        return self._client.presigned_get_object(
            bucket_name, object_name, expires=timedelta(seconds=ttl)
        )

    @staticmethod
    def _split(remote_ref: str) -> tuple[str, str]:
        parts = remote_ref.split("/", 1)
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Invalid storage path: {remote_ref}")
        return parts[0], parts[1]
