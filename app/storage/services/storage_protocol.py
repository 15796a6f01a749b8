"""
Storage backend protocol for audio object persistence.

This module defines the abstract interface for storage backends,
enabling different implementations (Google Drive, Supabase, MinIO, local
filesystem) to be used interchangeably by the storage gateway.
"""

from typing import Protocol, runtime_checkable

from tunevault_core.domain.storage import BackendKind


@runtime_checkable
class StorageBackend(Protocol):
    """
    Abstract storage interface for raw object bytes.

    Implementations are stateless adapters over network calls. Each method
    returns only on success; failures surface as the backend's own
    exceptions and are mapped by the gateway.
    """

    kind: BackendKind

    def put(self, key: str, content: bytes, content_type: str) -> str:
        """
        Store bytes and return the backend's reference for them.

        Args:
            key: Suggested object key (owner/object id).
            content: Bytes to store (possibly ciphertext).
            content_type: MIME type recorded with the blob.

        Returns:
            str: Remote reference used for every later call.
        """
        ...

    def get(self, remote_ref: str) -> bytes:
        """
        Fetch the bytes stored under a remote reference.
        """
        ...

    def delete(self, remote_ref: str) -> None:
        """
        Delete the bytes stored under a remote reference.

        Deleting a reference whose blob is already gone succeeds, so the
        gateway can always drop the metadata afterwards.
        """
        ...

    def signed_url(self, remote_ref: str, ttl_seconds: int) -> str:
        """
        Return a URL granting temporary read access.

        The TTL is advisory; backends may clamp or ignore it.
        """
        ...
