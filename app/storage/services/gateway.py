"""
Storage gateway: the one entry point routes use to touch stored audio.

The gateway composes content sniffing, per-user storage policy, envelope
encryption and a backend chosen per object. Every operation takes the
caller's AuthContext explicitly and checks ownership against the metadata
record before any backend access, so a non-owner gets Forbidden even when
the remote blob no longer exists.

Write path: sniff -> (seal) -> backend put -> metadata save.
Read path:  metadata -> ownership -> backend get -> (unseal).
"""

from __future__ import annotations

import uuid
from typing import Callable, Optional, TypeVar

from loguru import logger

from tunevault_core.config import settings
from tunevault_core.crypto import EncryptionEngine
from tunevault_core.domain.auth import AuthContext
from tunevault_core.domain.exceptions import (
    BackendFailureError,
    BackendNotConnectedError,
    ForbiddenError,
    ObjectNotFoundError,
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaTypeError,
)
from tunevault_core.domain.storage import (
    BackendKind,
    StoragePolicy,
    StoredObjectRef,
    utcnow,
)

from .content_type import sniff_audio_type
from .factory import get_storage_backend
from .repositories import ObjectMetadataStore, StoragePolicyStore
from .storage_protocol import StorageBackend

T = TypeVar("T")

# Ciphertext is opaque to the backend
ENCRYPTED_CONTENT_TYPE = "application/octet-stream"


class StorageGateway:
    """
    Ownership-checked, encryption-aware access to stored audio objects.

    Usage:
        gateway = StorageGateway(metadata_store, policy_store)
        ref = gateway.upload(auth, content, "audio/mpeg", "Demo take")
        content = gateway.download(auth, ref.object_id)
    """

    def __init__(
        self,
        metadata_store: ObjectMetadataStore,
        policy_store: StoragePolicyStore,
        engine: EncryptionEngine | None = None,
        backend_factory: Callable[..., StorageBackend] = get_storage_backend,
        max_upload_bytes: int | None = None,
        signed_url_max_ttl: int | None = None,
    ):
        self.metadata_store = metadata_store
        self.policy_store = policy_store
        self.engine = engine or EncryptionEngine()
        self.backend_factory = backend_factory
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_BYTES
        self.signed_url_max_ttl = signed_url_max_ttl or settings.SIGNED_URL_MAX_TTL

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    def policy_for(self, owner_id: str) -> StoragePolicy:
        """Return the owner's stored policy, or the configured defaults."""
        policy = self.policy_store.get(owner_id)
        if policy is None:
            policy = StoragePolicy(
                owner_id=owner_id,
                encryption_enabled=settings.DEFAULT_ENCRYPTION_ENABLED,
                backend_kind=BackendKind(settings.DEFAULT_BACKEND),
            )
        return policy

    def update_policy(self, auth: AuthContext, **changes) -> StoragePolicy:
        """
        Update the caller's policy. Fields left as None keep their value.

        Changing the backend affects new uploads only.

        Raises:
            BackendNotConnectedError: Google Drive selected without an
                access token.
        """
        current = self.policy_for(auth.subject_id)
        updates = {k: v for k, v in changes.items() if v is not None}
        updates["updated_at"] = utcnow()
        policy = current.model_copy(update=updates)
        if policy.backend_kind == BackendKind.GOOGLE_DRIVE and not policy.drive_access_token:
            raise BackendNotConnectedError("Connect a Google Drive account before selecting it")

        self.policy_store.save(policy)

        logger.info(
            f"[{auth.request_id}] Storage policy for {auth.subject_id}: "
            f"backend={policy.backend_kind.value} encryption={policy.encryption_enabled}"
        )
        return policy

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def upload(
        self,
        auth: AuthContext,
        content: bytes,
        declared_content_type: str | None,
        title: str = "",
    ) -> StoredObjectRef:
        """
        Store an audio upload for the caller.

        The content type is sniffed from the bytes; the declared type is only
        logged. Metadata is written only after the backend confirms the put.

        Raises:
            UnsupportedMediaTypeError: Empty payload or not audio.
            PayloadTooLargeError: Payload exceeds MAX_UPLOAD_BYTES.
            BackendFailureError: The backend write failed.
        """
        if not content:
            raise UnsupportedMediaTypeError("Uploaded file is empty")
        if len(content) > self.max_upload_bytes:
            raise PayloadTooLargeError(
                message_debug=f"{len(content)} bytes > {self.max_upload_bytes}"
            )

        content_type = sniff_audio_type(content)
        if content_type is None:
            logger.warning(
                f"[{auth.request_id}] Rejected upload declared as {declared_content_type}: "
                "content does not sniff as audio"
            )
            raise UnsupportedMediaTypeError()

        owner_id = auth.subject_id
        policy = self.policy_for(owner_id)
        object_id = str(uuid.uuid4())

        payload = content
        envelope = None
        stored_type = content_type
        if policy.encryption_enabled:
            payload, envelope = self.engine.seal(content)
            stored_type = ENCRYPTED_CONTENT_TYPE

        backend = self._backend(policy.backend_kind, policy, object_id, "upload")
        remote_ref = self._call(
            backend.put, object_id, "upload", f"{owner_id}/{object_id}", payload, stored_type
        )

        ref = StoredObjectRef(
            object_id=object_id,
            owner_id=owner_id,
            backend_kind=policy.backend_kind,
            remote_ref=remote_ref,
            content_type=content_type,
            size_bytes=len(content),
            envelope=envelope,
            title=title,
        )
        try:
            self.metadata_store.save(ref)
        except Exception:
            logger.error(
                f"[{object_id}] Metadata save failed after backend put; "
                f"orphaned blob at {policy.backend_kind.value}:{remote_ref}"
            )
            raise

        logger.info(
            f"[{auth.request_id}] Stored [{object_id}] {content_type} "
            f"{len(content)} bytes on {policy.backend_kind.value} "
            f"(encrypted={envelope is not None})"
        )
        return ref

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def get_object(self, auth: AuthContext, object_id: str) -> StoredObjectRef:
        """
        Return the caller's metadata record for an object.

        Raises:
            ObjectNotFoundError: No record with this id.
            ForbiddenError: The caller is not the owner.
        """
        ref = self.metadata_store.get(object_id)
        if ref is None:
            raise ObjectNotFoundError(message_debug=object_id)
        if ref.owner_id != auth.subject_id:
            logger.warning(
                f"[{auth.request_id}] {auth.subject_id} denied access to [{object_id}]"
            )
            raise ForbiddenError()
        return ref

    def list_objects(self, auth: AuthContext) -> list[StoredObjectRef]:
        return self.metadata_store.list_by_owner(auth.subject_id)

    def download(self, auth: AuthContext, object_id: str) -> bytes:
        """
        Return the plaintext bytes of one of the caller's objects.

        Raises:
            AuthenticationFailedError: Stored ciphertext failed verification.
        """
        _, content = self.open_stream(auth, object_id)
        return content

    def open_stream(
        self, auth: AuthContext, object_id: str
    ) -> tuple[StoredObjectRef, bytes]:
        """Return the object's metadata and plaintext bytes for streaming."""
        ref = self.get_object(auth, object_id)
        backend = self._backend_for(ref)
        content = self._call(backend.get, object_id, "download", ref.remote_ref)

        if ref.envelope is not None:
            content = self.engine.unseal(content, ref.envelope)

        return ref, content

    def signed_url(self, auth: AuthContext, object_id: str, ttl_seconds: int) -> str:
        """
        Return a temporary URL for the stored blob.

        For encrypted objects the URL serves ciphertext.
        """
        ref = self.get_object(auth, object_id)
        ttl = max(1, min(ttl_seconds, self.signed_url_max_ttl))
        backend = self._backend_for(ref)
        return self._call(backend.signed_url, object_id, "signed_url", ref.remote_ref, ttl)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def rename(self, auth: AuthContext, object_id: str, title: str) -> StoredObjectRef:
        ref = self.get_object(auth, object_id).with_title(title)
        self.metadata_store.save(ref)
        return ref

    def delete(self, auth: AuthContext, object_id: str) -> None:
        """
        Delete the remote blob, then the metadata record.

        If the remote delete fails the metadata is kept, so the object stays
        visible and the delete can be repeated.
        """
        ref = self.get_object(auth, object_id)
        backend = self._backend_for(ref)
        self._call(backend.delete, object_id, "delete", ref.remote_ref)
        self.metadata_store.delete(object_id)

        logger.info(f"[{auth.request_id}] Deleted [{object_id}]")

    # ------------------------------------------------------------------
    # Backend plumbing
    # ------------------------------------------------------------------

    def _backend_for(self, ref: StoredObjectRef) -> StorageBackend:
        # Reads always go to the backend recorded on the object
        return self._backend(
            ref.backend_kind, self.policy_for(ref.owner_id), ref.object_id, "resolve"
        )

    def _backend(
        self,
        kind: BackendKind,
        policy: Optional[StoragePolicy],
        object_id: str,
        operation: str,
    ) -> StorageBackend:
        return self._call(self.backend_factory, object_id, operation, kind, policy)

    @staticmethod
    def _call(func: Callable[..., T], object_id: str, operation: str, *args) -> T:
        try:
            return func(*args)
        except StorageError as e:
            logger.error(f"[{object_id}] {operation} failed: {e.message_safe}")
            raise
        except Exception as e:
            logger.error(f"[{object_id}] {operation} failed: {type(e).__name__}: {e}")
            raise BackendFailureError(message_debug=str(e), cause=e) from e
