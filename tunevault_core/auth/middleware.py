"""
FastAPI auth middleware.

Authenticates requests via the Authorization Bearer token and attaches an
AuthContext to request.state. A request without a token is passed through
anonymously; each route decides whether anonymous access is allowed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from tunevault_core.auth.credentials import CredentialValidator, extract_bearer
from tunevault_core.domain.auth import AuthContext, Principal
from tunevault_core.domain.exceptions import AuthError, MissingCredentialError

# Endpoints that never look at credentials
PUBLIC_PATHS = frozenset(
    {
        "/health",
        "/docs",
        "/openapi.json",
        "/redoc",
        "/metrics",
    }
)

DEV_PRINCIPAL = Principal(
    subject_id="dev",
    display_label="Development",
    roles=frozenset(["authenticated"]),
)


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware to authenticate requests via bearer JWT.

    Outcomes for non-public paths:
    - valid token: request.state.auth holds an AuthContext
    - no token: request.state.auth is None (anonymous)
    - any other credential failure: 401 with the failure code

    When disabled (require_auth=False), a development context is injected.
    """

    def __init__(
        self,
        app,
        require_auth: bool = True,
        validator: CredentialValidator | None = None,
    ):
        """Initialize auth middleware.

        Args:
            app: The FastAPI/Starlette application.
            require_auth: If False, inject a development context instead.
            validator: Credential validator. Built from settings when omitted.
        """
        super().__init__(app)
        self.require_auth = require_auth
        self._validator = validator

    @property
    def validator(self) -> CredentialValidator:
        """Lazily build the validator so importing the app needs no secret."""
        if self._validator is None:
            self._validator = CredentialValidator.from_settings()
        return self._validator

    async def dispatch(self, request: Request, call_next):
        """Process incoming request for authentication."""
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request.state.request_id = request_id
        request.state.auth = None

        path = request.url.path.rstrip("/") or "/"
        if path in PUBLIC_PATHS:
            return await call_next(request)

        if not self.require_auth:
            request.state.auth = AuthContext(
                principal=DEV_PRINCIPAL,
                authenticated_at=datetime.now(timezone.utc),
                request_id=request_id,
            )
            return await call_next(request)

        token = extract_bearer(request.headers.get("Authorization"))
        if token is None:
            logger.debug(f"[{request_id}] Anonymous request for {path}")
            return await call_next(request)

        try:
            principal = self.validator.validate(token)
        except MissingCredentialError:
            logger.debug(f"[{request_id}] Anonymous request for {path}")
            return await call_next(request)
        except AuthError as e:
            logger.warning(f"[{request_id}] Rejected credential for {path}: {e.code}")
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_dict(),
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.auth = AuthContext(
            principal=principal,
            authenticated_at=datetime.now(timezone.utc),
            request_id=request_id,
        )

        logger.debug(f"[{request_id}] Authenticated: subject={principal.subject_id}")

        return await call_next(request)
