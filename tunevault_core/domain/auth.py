"""
Authentication domain models.

This module defines the core data structures for auth:
- Principal: Authenticated identity derived from a validated bearer token
- AuthContext: Request-scoped auth context passed explicitly to services
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Principal:
    """Authenticated identity derived from a bearer token.

    Produced fresh for every request and never persisted.
    """

    subject_id: str
    display_label: str
    roles: frozenset[str]


@dataclass
class AuthContext:
    """Request-scoped authentication context.

    Attached to request.state.auth by the auth middleware and handed to the
    storage gateway as an explicit argument.
    """

    principal: Principal
    authenticated_at: datetime
    request_id: str

    @property
    def subject_id(self) -> str:
        """Get the caller's subject id from the principal."""
        return self.principal.subject_id
