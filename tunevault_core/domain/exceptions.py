"""
Standard exceptions for tunevault.

This module defines the hierarchy of exceptions raised by the core pipeline:
credential validation, encryption, storage and range streaming. Every error
is a ServiceError, so the API layer renders them uniformly.
"""

from __future__ import annotations

from tunevault_core.runtime.errors import ErrorCode, ServiceError


class TunevaultError(ServiceError):
    """Base exception for all tunevault domain errors."""

    error_code: str = ErrorCode.INTERNAL_ERROR
    default_message: str = "Internal error"
    is_retryable: bool = False

    def __init__(
        self,
        message: str | None = None,
        *,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=self.error_code,
            message_safe=message or self.default_message,
            message_debug=message_debug,
            retryable=self.is_retryable,
            cause=cause,
            debug_id=debug_id,
        )


# ==============================================================================
# CREDENTIALS
# ==============================================================================


class AuthError(TunevaultError):
    """Base authentication error. Always answered with 401."""

    status_code = 401
    error_code = ErrorCode.CREDENTIAL_MALFORMED
    default_message = "Invalid credentials"


class MissingCredentialError(AuthError):
    """No bearer token was presented."""

    error_code = ErrorCode.CREDENTIAL_MISSING
    default_message = "Authentication required"


class MalformedCredentialError(AuthError):
    """Token cannot be parsed as a signed structure or its signature is invalid."""

    error_code = ErrorCode.CREDENTIAL_MALFORMED
    default_message = "Malformed or unsigned token"


class ExpiredCredentialError(AuthError):
    """Token expiry claim is in the past."""

    error_code = ErrorCode.CREDENTIAL_EXPIRED
    default_message = "Token has expired"


class IssuerMismatchError(AuthError):
    error_code = ErrorCode.ISSUER_MISMATCH
    default_message = "Token issuer is not accepted"


class AudienceMismatchError(AuthError):
    error_code = ErrorCode.AUDIENCE_MISMATCH
    default_message = "Token audience is not accepted"


class RoleMismatchError(AuthError):
    error_code = ErrorCode.ROLE_MISMATCH
    default_message = "Token role is not accepted"


# ==============================================================================
# CRYPTO
# ==============================================================================


class CryptoError(TunevaultError):
    """Base exception for encryption/decryption failures.

    Never swallowed: a failed decryption means tampering or corruption and
    must fail the request instead of returning garbage bytes.
    """

    status_code = 500


class AuthenticationFailedError(CryptoError):
    """Ciphertext failed its integrity check (or CBC padding check)."""

    error_code = ErrorCode.AUTHENTICATION_FAILED
    default_message = "Stored object failed integrity verification"


class InvalidKeyOrNonceLengthError(CryptoError):
    error_code = ErrorCode.INVALID_KEY_OR_NONCE_LENGTH
    default_message = "Encryption key or nonce has an invalid length"


# ==============================================================================
# STORAGE
# ==============================================================================


class StorageError(TunevaultError):
    """Base exception for storage gateway failures."""

    status_code = 500


class UnsupportedMediaTypeError(StorageError):
    """Uploaded bytes do not sniff as audio."""

    status_code = 415
    error_code = ErrorCode.UNSUPPORTED_MEDIA_TYPE
    default_message = "Uploaded file is not a supported audio format"


class PayloadTooLargeError(StorageError):
    status_code = 413
    error_code = ErrorCode.PAYLOAD_TOO_LARGE
    default_message = "Uploaded file exceeds the maximum allowed size"


class ObjectNotFoundError(StorageError):
    status_code = 404
    error_code = ErrorCode.NOT_FOUND
    default_message = "Object not found"


class ForbiddenError(StorageError):
    """Requester is not the owner of the object."""

    status_code = 403
    error_code = ErrorCode.FORBIDDEN
    default_message = "Not authorized to access this object"


class BackendNotConnectedError(StorageError):
    """The chosen backend needs account credentials the user has not provided."""

    status_code = 409
    error_code = ErrorCode.BACKEND_NOT_CONNECTED
    default_message = "Storage backend is not connected for this user"


class BackendFailureError(StorageError):
    """A remote storage backend call failed or timed out."""

    status_code = 502
    error_code = ErrorCode.BACKEND_FAILURE
    default_message = "Storage backend temporarily unavailable"
    is_retryable = True


# ==============================================================================
# STREAMING
# ==============================================================================


class RangeError(TunevaultError):
    """Base exception for HTTP Range handling."""

    status_code = 416


class RangeNotSatisfiableError(RangeError):
    """Requested window lies outside the object."""

    error_code = ErrorCode.RANGE_NOT_SATISFIABLE
    default_message = "Requested range not satisfiable"

    def __init__(self, total_length: int, message: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.total_length = total_length
