"""
Pydantic schemas for the storage module.

Request/response models for the storage API. Envelope key material and
remote references never leave the service.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tunevault_core.domain.storage import BackendKind, StoragePolicy, StoredObjectRef


# ==============================================================================
# OBJECT SCHEMAS
# ==============================================================================


class StoredObjectResponse(BaseModel):
    """Response model for one stored object."""

    object_id: str
    title: str
    content_type: str
    size_bytes: int
    backend_kind: BackendKind
    encrypted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_ref(cls, ref: StoredObjectRef) -> "StoredObjectResponse":
        return cls(
            object_id=ref.object_id,
            title=ref.title,
            content_type=ref.content_type,
            size_bytes=ref.size_bytes,
            backend_kind=ref.backend_kind,
            encrypted=ref.is_encrypted,
            created_at=ref.created_at,
            updated_at=ref.updated_at,
        )


class RenameObjectRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int


# ==============================================================================
# PREFERENCES SCHEMAS
# ==============================================================================


class StoragePreferencesResponse(BaseModel):
    """The caller's storage policy, without the Drive token itself."""

    encryption_enabled: bool
    backend_kind: BackendKind
    drive_connected: bool
    drive_folder_id: Optional[str] = None

    @classmethod
    def from_policy(cls, policy: StoragePolicy) -> "StoragePreferencesResponse":
        return cls(
            encryption_enabled=policy.encryption_enabled,
            backend_kind=policy.backend_kind,
            drive_connected=bool(policy.drive_access_token),
            drive_folder_id=policy.drive_folder_id,
        )


class UpdateStoragePreferencesRequest(BaseModel):
    """Fields left out keep their current value."""

    encryption_enabled: Optional[bool] = None
    backend_kind: Optional[BackendKind] = None
    drive_access_token: Optional[str] = None
    drive_folder_id: Optional[str] = None
