"""
Domain models for stored audio objects.

These models describe what the storage gateway persists alongside each
remote blob: which backend holds it, how it was encrypted, and who owns it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackendKind(str, Enum):
    """Remote stores an object can be written to."""

    GOOGLE_DRIVE = "google_drive"  # per-user cloud drive
    SUPABASE = "supabase"  # generic object store over REST
    MINIO = "minio"  # S3-compatible object store
    LOCAL = "local"  # filesystem, development only


class EncryptionAlgorithm(str, Enum):
    """
    Symmetric algorithms understood by the encryption engine.

    The tag travels with every envelope, so objects written under one
    deployment setting stay readable after the setting changes.
    """

    AES_256_GCM = "AES-256-GCM"
    AES_256_CBC = "AES-256-CBC"  # no integrity tag


class EncryptionEnvelope(BaseModel):
    """
    Per-object key material, stored with the object's metadata.

    Key and nonce are base64 text. Losing the envelope strands the
    ciphertext permanently.
    """

    algorithm: EncryptionAlgorithm
    key: str
    nonce: str

    model_config = {"frozen": True}


class StoredObjectRef(BaseModel):
    """
    Metadata record for one uploaded audio object.

    Created only after the backend confirms the write. The identity fields
    and the envelope never change; use ``with_title`` for the one permitted
    mutation.
    """

    object_id: str = Field(..., description="Globally unique id (uuid4)")
    owner_id: str = Field(..., description="Subject id of the uploader")
    backend_kind: BackendKind = Field(..., description="Backend that holds the bytes")
    remote_ref: str = Field(..., description="Backend-specific location string")
    content_type: str = Field(..., description="Sniffed MIME type")
    size_bytes: int = Field(..., ge=0, description="Plaintext size in bytes")
    envelope: Optional[EncryptionEnvelope] = Field(None, description="Present when encrypted at rest")
    title: str = Field("", description="Display title")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}

    @property
    def is_encrypted(self) -> bool:
        return self.envelope is not None

    def with_title(self, title: str) -> "StoredObjectRef":
        """Return a copy with a new title and a refreshed updated_at."""
        return self.model_copy(update={"title": title, "updated_at": utcnow()})


class StoragePolicy(BaseModel):
    """
    Per-user storage settings consulted by the gateway on upload.

    ``encryption_enabled`` is the single authoritative switch for whether new
    uploads are encrypted. Changing ``backend_kind`` affects new uploads
    only; existing objects stay on the backend recorded in their metadata.
    """

    owner_id: str
    encryption_enabled: bool
    backend_kind: BackendKind
    drive_access_token: Optional[str] = None
    drive_folder_id: Optional[str] = None
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}
