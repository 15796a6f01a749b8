"""
Bearer credential validation.

Verifies HS256-signed JWTs locally with the shared secret configured at
startup and turns them into a Principal. Validation is a pure computation
over the token bytes and the current time: no network calls, no retries.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from loguru import logger

from tunevault_core.config import settings
from tunevault_core.domain.auth import Principal
from tunevault_core.domain.exceptions import (
    AudienceMismatchError,
    AuthError,
    ExpiredCredentialError,
    IssuerMismatchError,
    MalformedCredentialError,
    MissingCredentialError,
    RoleMismatchError,
)

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


def extract_bearer(authorization: str | None) -> str | None:
    """Return the token carried by an ``Authorization: Bearer`` header value.

    Anything that is not a Bearer header counts as no token at all.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class CredentialValidator:
    """Validates bearer tokens against statically configured expectations.

    Instances are immutable after construction and safe to share across
    concurrent requests.
    """

    def __init__(
        self,
        signing_secret: str | None = None,
        expected_issuer: str | None = None,
        expected_audience: str | None = None,
        expected_role: str | None = None,
        leeway_seconds: int = 0,
    ):
        """Initialize the validator.

        Args:
            signing_secret: HMAC secret. Defaults to settings.JWT_SECRET.
            expected_issuer: Required ``iss`` value. None disables the check.
            expected_audience: Required ``aud`` value. None disables the check.
            expected_role: Required ``role`` value. None disables the check.
            leeway_seconds: Clock skew tolerated on ``exp``.
        """
        self.signing_secret = signing_secret or settings.JWT_SECRET
        self.expected_issuer = expected_issuer
        self.expected_audience = expected_audience
        self.expected_role = expected_role
        self.leeway_seconds = leeway_seconds

        if not self.signing_secret:
            raise ValueError("JWT_SECRET must be configured")

    @classmethod
    def from_settings(cls) -> "CredentialValidator":
        return cls(
            signing_secret=settings.JWT_SECRET,
            expected_issuer=settings.JWT_ISSUER,
            expected_audience=settings.JWT_AUDIENCE,
            expected_role=settings.JWT_ROLE,
        )

    def validate(self, raw_token: str | None) -> Principal:
        """Validate a raw bearer token.

        Args:
            raw_token: The token string, without the "Bearer " prefix.

        Returns:
            The Principal described by the token's claims.

        Raises:
            MissingCredentialError: No token was supplied.
            MalformedCredentialError: Not a parsable, correctly signed JWT.
            ExpiredCredentialError: The ``exp`` claim is in the past.
            IssuerMismatchError: ``iss`` differs from the expected issuer.
            AudienceMismatchError: ``aud`` differs from the expected audience.
            RoleMismatchError: ``role`` differs from the expected role.
        """
        if raw_token is None or not raw_token.strip():
            logger.debug("No bearer credential presented")
            raise MissingCredentialError()

        try:
            claims = self._decode(raw_token.strip())
            principal = self._to_principal(claims)
        except AuthError as e:
            logger.warning(f"[{e.debug_id}] Credential rejected: {e.code}")
            raise

        return principal

    def _decode(self, token: str) -> dict[str, Any]:
        options = {
            "require": ["exp", "sub"],
            "verify_aud": self.expected_audience is not None,
            "verify_iss": self.expected_issuer is not None,
        }
        try:
            return jwt.decode(
                token,
                self.signing_secret,
                algorithms=[ALGORITHM],
                audience=self.expected_audience,
                issuer=self.expected_issuer,
                leeway=self.leeway_seconds,
                options=options,
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredCredentialError(cause=e) from e
        except jwt.InvalidIssuerError as e:
            raise IssuerMismatchError(cause=e) from e
        except jwt.InvalidAudienceError as e:
            raise AudienceMismatchError(cause=e) from e
        except jwt.MissingRequiredClaimError as e:
            if e.claim == "iss":
                raise IssuerMismatchError(cause=e) from e
            if e.claim == "aud":
                raise AudienceMismatchError(cause=e) from e
            raise MalformedCredentialError(
                f"Token is missing the '{e.claim}' claim", cause=e
            ) from e
        except jwt.InvalidTokenError as e:
            raise MalformedCredentialError(message_debug=str(e), cause=e) from e

    def _to_principal(self, claims: dict[str, Any]) -> Principal:
        role = claims.get("role")
        if self.expected_role is not None and role != self.expected_role:
            raise RoleMismatchError(message_debug=f"role={role!r}")

        subject_id = claims.get("sub")
        if not isinstance(subject_id, str) or not subject_id:
            raise MalformedCredentialError("Token subject is empty")

        roles = {r for r in claims.get("roles", []) if isinstance(r, str)}
        if isinstance(role, str):
            roles.add(role)

        display_label = claims.get("email") or claims.get("name") or subject_id
        return Principal(
            subject_id=subject_id,
            display_label=str(display_label),
            roles=frozenset(roles),
        )


def create_access_token(
    subject_id: str,
    *,
    secret: str | None = None,
    email: str | None = None,
    role: str | None = None,
    issuer: str | None = None,
    audience: str | None = None,
    ttl_seconds: int | None = None,
    expires_at: datetime | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed access token with the claim layout the validator reads.

    Real deployments receive tokens from the identity provider; this is for
    tests and local tooling.

    Args:
        subject_id: Value for the ``sub`` claim.
        secret: Signing secret. Defaults to settings.JWT_SECRET.
        email: Optional ``email`` claim, used as the display label.
        role: ``role`` claim. Defaults to settings.JWT_ROLE.
        issuer: ``iss`` claim. Defaults to settings.JWT_ISSUER.
        audience: ``aud`` claim. Defaults to settings.JWT_AUDIENCE.
        ttl_seconds: Lifetime. Defaults to settings.JWT_ACCESS_TTL.
        expires_at: Absolute expiry, overrides ttl_seconds.
        extra_claims: Additional claims merged into the payload.

    Returns:
        Encoded JWT string.
    """
    signing_secret = secret or settings.JWT_SECRET
    if not signing_secret:
        raise ValueError("JWT_SECRET must be configured")

    now = datetime.now(timezone.utc)
    if expires_at is None:
        lifetime = ttl_seconds if ttl_seconds is not None else settings.JWT_ACCESS_TTL
        expires_at = now + timedelta(seconds=lifetime)

    payload: dict[str, Any] = {
        "sub": subject_id,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    optional_claims = {
        "email": email,
        "role": role if role is not None else settings.JWT_ROLE,
        "iss": issuer if issuer is not None else settings.JWT_ISSUER,
        "aud": audience if audience is not None else settings.JWT_AUDIENCE,
    }
    payload.update({k: v for k, v in optional_claims.items() if v is not None})
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(payload, signing_secret, algorithm=ALGORITHM)
