"""
Share link domain models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from tunevault_core.domain.storage import utcnow


class ShareLinkStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"


class ShareLink(BaseModel):
    """
    Anonymous read access to one stored object.

    Whoever holds the token can stream the object until the link is revoked
    or expires.
    """

    link_id: str
    owner_id: str
    object_id: str
    token: str
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: Optional[datetime] = None
    status: ShareLinkStatus = ShareLinkStatus.ACTIVE

    model_config = {"frozen": True}

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at is not None and self.expires_at <= (now or utcnow())

    def with_status(self, status: ShareLinkStatus) -> "ShareLink":
        return self.model_copy(update={"status": status})
