"""
Error model and retry helpers shared by the tunevault packages.
"""

from .errors import ErrorCode, RetryableError, ServiceError
from .retry import RetryPolicy, sync_with_retry

__all__ = [
    "ErrorCode",
    "ServiceError",
    "RetryableError",
    "RetryPolicy",
    "sync_with_retry",
]
