"""
Shared request handling for REST storage backends.

Google Drive is spoken to over plain HTTP. This base class sends
requests through the pooled httpx client, converts throttling and gateway
statuses into RetryableError, and retries them with exponential backoff.
Timeouts are not retried: the caller has already waited the full budget.
"""

from __future__ import annotations

import httpx
from loguru import logger

from tunevault_core.config import settings
from tunevault_core.infrastructure.http import get_http_client
from tunevault_core.runtime import ErrorCode, RetryableError, RetryPolicy, sync_with_retry


class RestStorageBase:
    """Base class for backends that talk to a storage service over HTTP."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self._client = client or get_http_client()
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.BACKEND_MAX_ATTEMPTS
        )
        self._send = sync_with_retry(self.retry_policy)(self._send_once)

    def _headers(self) -> dict[str, str]:
        return {}

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request and return the successful response.

        Raises:
            RetryableError: If the service kept answering with a transient
                status after every attempt.
            httpx.HTTPStatusError: For any other non-2xx status.
            httpx.TimeoutException: If the request timed out.
        """
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        return self._send(method, url, headers=headers, **kwargs)

    def _send_once(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = self._client.request(method, url, **kwargs)

        if self.retry_policy.should_retry_status(response.status_code):
            logger.warning(f"{method} {url} answered {response.status_code}")
            raise RetryableError(
                code=ErrorCode.BACKEND_UNAVAILABLE,
                message_safe=f"Storage service answered {response.status_code}",
                message_debug=response.text[:500],
            )

        response.raise_for_status()
        return response
