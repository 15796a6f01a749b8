"""
Supabase Storage backend.

Talks to Supabase Storage through the official ``supabase`` client with the
service key. Remote references are object paths inside the configured
bucket.
"""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger
from storage3.exceptions import StorageApiError
from supabase import Client, ClientOptions, create_client

from tunevault_core.config import settings
from tunevault_core.domain.storage import BackendKind
from tunevault_core.runtime import ErrorCode, RetryableError, RetryPolicy, sync_with_retry


def _status_of(error: StorageApiError) -> int:
    # storage3 reports the status as int or str depending on the endpoint
    try:
        return int(error.status)
    except (TypeError, ValueError):
        return 0


class SupabaseStorage:
    """
    Supabase Storage bucket adapter.

    Throttling and gateway statuses are retried with the adapter's
    RetryPolicy; every other StorageApiError propagates to the gateway.

    Usage:
        storage = SupabaseStorage()
        ref = storage.put("user-1/obj-1", content, "audio/mpeg")
        url = storage.signed_url(ref, 3600)
    """

    kind = BackendKind.SUPABASE

    def __init__(
        self,
        url: str | None = None,
        service_key: str | None = None,
        bucket: str | None = None,
        client: Client | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        if client is None:
            base_url = url or settings.SUPABASE_URL
            if not base_url:
                raise ValueError("SUPABASE_URL is not configured")
            client = create_client(
                base_url,
                service_key or settings.SUPABASE_KEY,
                options=ClientOptions(
                    storage_client_timeout=int(settings.BACKEND_TIMEOUT_SECONDS)
                ),
            )
        self._client = client
        self.bucket = bucket or settings.SUPABASE_BUCKET
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.BACKEND_MAX_ATTEMPTS
        )
        self._call = sync_with_retry(self.retry_policy)(self._call_once)

    def _call_once(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except StorageApiError as e:
            status = _status_of(e)
            if not self.retry_policy.should_retry_status(status):
                raise
            logger.warning(f"Supabase answered {status} for {self.bucket}: {e.message}")
            raise RetryableError(
                code=ErrorCode.BACKEND_UNAVAILABLE,
                message_safe=f"Storage service answered {status}",
                message_debug=str(e),
                cause=e,
            ) from e

    def _bucket(self):
        return self._client.storage.from_(self.bucket)

    def put(self, key: str, content: bytes, content_type: str) -> str:
        logger.info(f"Uploading {len(content)} bytes to supabase:{self.bucket}/{key}")
        self._call(
            self._bucket().upload,
            key,
            content,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        return key

    def get(self, remote_ref: str) -> bytes:
        logger.info(f"Downloading supabase:{self.bucket}/{remote_ref}")
        return self._call(self._bucket().download, remote_ref)

    def delete(self, remote_ref: str) -> None:
        """Remove an object. An object that is already gone counts as deleted."""
        logger.info(f"Deleting supabase:{self.bucket}/{remote_ref}")
        try:
            removed = self._call(self._bucket().remove, [remote_ref])
        except StorageApiError as e:
            if _status_of(e) != 404:
                raise
            removed = []

        if not removed:
            logger.warning(f"supabase:{self.bucket}/{remote_ref} already deleted")

    def signed_url(self, remote_ref: str, ttl_seconds: int) -> str:
        """Ask Supabase to sign a download URL valid for ``ttl_seconds``."""
        signed = self._call(self._bucket().create_signed_url, remote_ref, ttl_seconds)
        url = signed.get("signedURL") or signed.get("signedUrl")
        if not url:
            raise ValueError(f"Supabase sign response has no URL: {signed}")
        return url
