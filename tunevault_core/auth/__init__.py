"""
Auth module for tunevault.

Provides bearer credential validation, the auth middleware, and the
FastAPI dependencies that hand the caller's context to routes.
"""

from tunevault_core.auth.credentials import (
    CredentialValidator,
    create_access_token,
    extract_bearer,
)
from tunevault_core.auth.dependencies import (
    get_auth_context,
    get_optional_auth_context,
)
from tunevault_core.auth.middleware import AuthMiddleware

__all__ = [
    "CredentialValidator",
    "AuthMiddleware",
    "create_access_token",
    "extract_bearer",
    "get_auth_context",
    "get_optional_auth_context",
]
