"""
Google Drive backend.

Objects are written to the owner's own Drive using the OAuth access token
stored in their storage policy. Remote references are Drive file ids.
"""

from __future__ import annotations

import json
import uuid

import httpx
from loguru import logger

from tunevault_core.config import settings
from tunevault_core.domain.storage import BackendKind
from tunevault_core.runtime import RetryPolicy

from .rest_storage import RestStorageBase


class GoogleDriveStorage(RestStorageBase):
    """
    Drive v3 REST adapter bound to one user's access token.

    Drive has no expiring links, so ``signed_url`` returns the file's
    ``webContentLink`` and ignores the TTL.
    """

    kind = BackendKind.GOOGLE_DRIVE

    def __init__(
        self,
        access_token: str,
        folder_id: str | None = None,
        client: httpx.Client | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        super().__init__(client=client, retry_policy=retry_policy)
        if not access_token:
            raise ValueError("Google Drive access token is required")
        self.access_token = access_token
        self.folder_id = folder_id
        self.api_url = settings.GOOGLE_DRIVE_API_URL.rstrip("/")
        self.upload_url = settings.GOOGLE_DRIVE_UPLOAD_URL.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def put(self, key: str, content: bytes, content_type: str) -> str:
        """Upload with a multipart/related request and return the new file id."""
        metadata: dict = {"name": key.replace("/", "_"), "mimeType": content_type}
        if self.folder_id:
            metadata["parents"] = [self.folder_id]

        boundary = uuid.uuid4().hex
        body = (
            f"--{boundary}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{json.dumps(metadata)}\r\n"
            f"--{boundary}\r\n"
            f"Content-Type: {content_type}\r\n\r\n"
        ).encode() + content + f"\r\n--{boundary}--".encode()

        logger.info(f"Uploading {len(content)} bytes to Google Drive as {metadata['name']}")
        response = self._request(
            "POST",
            f"{self.upload_url}/files",
            params={"uploadType": "multipart", "fields": "id"},
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        return response.json()["id"]

    def get(self, remote_ref: str) -> bytes:
        logger.info(f"Downloading drive:{remote_ref}")
        response = self._request(
            "GET", f"{self.api_url}/files/{remote_ref}", params={"alt": "media"}
        )
        return response.content

    def delete(self, remote_ref: str) -> None:
        """Delete a Drive file. A file that is already gone counts as deleted."""
        logger.info(f"Deleting drive:{remote_ref}")
        try:
            self._request("DELETE", f"{self.api_url}/files/{remote_ref}")
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 404:
                raise
            logger.warning(f"Drive file {remote_ref} already deleted")

    def signed_url(self, remote_ref: str, ttl_seconds: int) -> str:
        logger.debug(f"Drive links do not expire; ignoring ttl={ttl_seconds}s")
        response = self._request(
            "GET",
            f"{self.api_url}/files/{remote_ref}",
            params={"fields": "webContentLink"},
        )
        link = response.json().get("webContentLink")
        if not link:
            raise ValueError(f"Drive file {remote_ref} has no download link")
        return link
