"""
Backend selection.

The gateway asks for a backend either by the kind recorded on an existing
object or by the kind in a user's storage policy for new uploads. Shared
backends are built once; Google Drive adapters are bound to one user's token
and built per call.
"""

from __future__ import annotations

from loguru import logger

from tunevault_core.domain.exceptions import BackendNotConnectedError
from tunevault_core.domain.storage import BackendKind, StoragePolicy

from .google_drive_storage import GoogleDriveStorage
from .local_storage import LocalStorage
from .minio_storage import MinIOStorage
from .storage_protocol import StorageBackend
from .supabase_storage import SupabaseStorage

_shared_backends: dict[BackendKind, StorageBackend] = {}


def get_storage_backend(
    kind: BackendKind | str, policy: StoragePolicy | None = None
) -> StorageBackend:
    """
    Factory function to get the backend for a given kind.

    Args:
        kind: Backend kind to return.
        policy: Owner's storage policy; required for Google Drive, whose
            adapter needs the owner's access token.

    Returns:
        StorageBackend: The backend instance.

    Raises:
        BackendNotConnectedError: If Google Drive is requested for a user who
            has not connected a Drive account.
    """
    kind = BackendKind(kind)

    if kind is BackendKind.GOOGLE_DRIVE:
        if policy is None or not policy.drive_access_token:
            raise BackendNotConnectedError("Google Drive is not connected for this user")
        return GoogleDriveStorage(
            access_token=policy.drive_access_token,
            folder_id=policy.drive_folder_id,
        )

    backend = _shared_backends.get(kind)
    if backend is None:
        logger.info(f"Using {kind.value} storage backend")
        if kind is BackendKind.MINIO:
            backend = MinIOStorage()
        elif kind is BackendKind.SUPABASE:
            backend = SupabaseStorage()
        else:
            backend = LocalStorage()
        _shared_backends[kind] = backend
    return backend


def reset_storage_backends() -> None:
    """Drop cached shared backends (used when settings change in tests)."""
    _shared_backends.clear()
