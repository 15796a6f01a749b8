"""
Base error type shared by every tunevault failure.

A ServiceError knows its HTTP status and whether the caller may try again.
Storage adapters raise RetryableError for transient remote answers; the
retry decorator in ``retry.py`` is the only thing that looks at it.
"""

from __future__ import annotations

import uuid
from typing import Any


class ServiceError(Exception):
    """
    Error rendered by the API as ``{"code", "message", "debug_id"}``.

    ``message_debug`` and ``cause`` stay server-side; the ``debug_id`` ties
    the client-visible body to the log line.
    """

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        retryable: bool = False,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.retryable = retryable
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message_safe,
            "debug_id": self.debug_id,
        }


class RetryableError(ServiceError):
    """A storage service answered 429 or a gateway status; worth another attempt."""

    status_code = 503

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=True,
            cause=cause,
            debug_id=debug_id,
        )


class ErrorCode:
    """Machine-readable codes returned in error bodies."""

    # Credentials
    CREDENTIAL_MISSING = "CREDENTIAL_MISSING"
    CREDENTIAL_MALFORMED = "CREDENTIAL_MALFORMED"
    CREDENTIAL_EXPIRED = "CREDENTIAL_EXPIRED"
    ISSUER_MISMATCH = "ISSUER_MISMATCH"
    AUDIENCE_MISMATCH = "AUDIENCE_MISMATCH"
    ROLE_MISMATCH = "ROLE_MISMATCH"

    # Crypto
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INVALID_KEY_OR_NONCE_LENGTH = "INVALID_KEY_OR_NONCE_LENGTH"

    # Storage
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    BACKEND_FAILURE = "BACKEND_FAILURE"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    BACKEND_NOT_CONNECTED = "BACKEND_NOT_CONNECTED"

    # Streaming
    RANGE_NOT_SATISFIABLE = "RANGE_NOT_SATISFIABLE"

    # Internal
    INTERNAL_ERROR = "INTERNAL_ERROR"
