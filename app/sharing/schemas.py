"""
Pydantic schemas for the sharing module.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .models import ShareLink


class CreateShareLinkRequest(BaseModel):
    """Request body for creating a share link."""

    object_id: str
    expires_in_hours: Optional[int] = Field(None, ge=1, description="Defaults to the server setting")


class ShareLinkResponse(BaseModel):
    """Response model for one share link."""

    link_id: str
    object_id: str
    token: str
    status: str
    created_at: datetime
    expires_at: Optional[datetime] = None

    @classmethod
    def from_link(cls, link: ShareLink) -> "ShareLinkResponse":
        return cls(
            link_id=link.link_id,
            object_id=link.object_id,
            token=link.token,
            status=link.status.value,
            created_at=link.created_at,
            expires_at=link.expires_at,
        )
