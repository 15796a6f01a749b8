"""
Local filesystem storage backend.

This implementation stores objects on the local filesystem,
useful for development and testing without MinIO.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from tunevault_core.config import settings
from tunevault_core.domain.storage import BackendKind


class LocalStorage:
    """
    File-system based storage for local development.

    Stores objects under a configurable base directory, organized
    by owner. Remote references are paths relative to the base directory.

    Usage:
        storage = LocalStorage(base_path="/tmp/tunevault-storage")
        ref = storage.put("user-1/obj-1", content, "audio/mpeg")
        content = storage.get(ref)
    """

    kind = BackendKind.LOCAL

    def __init__(self, base_path: str | None = None):
        """
        Initialize local storage.

        Args:
            base_path: Root directory for all stored objects.
        """
        self.base_path = Path(base_path or settings.LOCAL_STORAGE_PATH).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalStorage initialized at {self.base_path}")

    def put(self, key: str, content: bytes, content_type: str) -> str:
        """
        Write content to the local filesystem.

        The content type is not persisted; the gateway records it in metadata.

        Returns:
            str: The storage path relative to the base directory.
        """
        target_file = self._resolve(key)
        target_file.parent.mkdir(parents=True, exist_ok=True)
        target_file.write_bytes(content)

        logger.info(f"Stored {len(content)} bytes at {key}")
        return key

    def get(self, remote_ref: str) -> bytes:
        """
        Read content from the local filesystem.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        target_file = self._resolve(remote_ref)

        if not target_file.exists():
            raise FileNotFoundError(f"File not found: {remote_ref}")

        logger.info(f"Read {remote_ref}")
        return target_file.read_bytes()

    def delete(self, remote_ref: str) -> None:
        target_file = self._resolve(remote_ref)

        if target_file.exists():
            target_file.unlink()
            logger.info(f"Deleted {remote_ref}")
        else:
            logger.warning(f"File not found for deletion: {remote_ref}")

    def signed_url(self, remote_ref: str, ttl_seconds: int) -> str:
        """Return a file:// URI. There is no expiry on the local filesystem."""
        return self._resolve(remote_ref).as_uri()

    def _resolve(self, relative: str) -> Path:
        target = (self.base_path / relative).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path escapes storage root: {relative}")
        return target
