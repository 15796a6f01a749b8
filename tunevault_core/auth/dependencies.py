"""
FastAPI dependencies for authentication.

Routes receive the caller's AuthContext explicitly through these
dependencies and pass it on to the services they call.
"""

from __future__ import annotations

from fastapi import Depends, Request

from tunevault_core.domain.auth import AuthContext
from tunevault_core.domain.exceptions import MissingCredentialError


def get_optional_auth_context(request: Request) -> AuthContext | None:
    """Get auth context if the request carried a valid token.

    Used by routes that permit anonymous access.
    """
    return getattr(request.state, "auth", None)


def get_auth_context(
    auth: AuthContext | None = Depends(get_optional_auth_context),
) -> AuthContext:
    """Get auth context from request state.

    Raises:
        MissingCredentialError: If the request is anonymous. Rendered as a
            401 by the application's ServiceError handler.
    """
    if not auth:
        raise MissingCredentialError()
    return auth
