"""
Storage routes.

This module handles the caller's audio objects:
- Upload, list, rename and delete objects
- Download full bytes or mint a temporary backend URL
- Read and update per-user storage preferences

Handlers are plain ``def``: backend calls block, so FastAPI runs them in its
threadpool. Domain errors propagate to the application's exception handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile
from loguru import logger

from app.dependencies import get_storage_gateway
from app.storage.schemas import (
    RenameObjectRequest,
    SignedUrlResponse,
    StoragePreferencesResponse,
    StoredObjectResponse,
    UpdateStoragePreferencesRequest,
)
from app.storage.services.gateway import StorageGateway
from tunevault_core.auth.dependencies import get_auth_context
from tunevault_core.config import settings
from tunevault_core.domain.auth import AuthContext
from tunevault_core.infrastructure.rate_limiter import limiter

router = APIRouter(prefix="/storage")


@router.post("/upload", response_model=StoredObjectResponse, status_code=201)
@limiter.limit(settings.UPLOAD_RATE_LIMIT)
def upload_object(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(default=""),
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Upload an audio file for the caller.

    The content type is sniffed from the file's bytes; the declared type is
    ignored for validation.

    Args:
        file: The audio file.
        title: Display title. Defaults to the uploaded filename.

    Returns:
        StoredObjectResponse: The stored object's metadata.
    """
    # Read one byte past the limit so oversize uploads are detected
    content = file.file.read(gateway.max_upload_bytes + 1)

    logger.info(
        f"[{auth.request_id}] Received upload {file.filename!r} "
        f"({len(content)} bytes, declared {file.content_type})"
    )

    ref = gateway.upload(
        auth,
        content,
        declared_content_type=file.content_type,
        title=title or file.filename or "",
    )
    return StoredObjectResponse.from_ref(ref)


@router.get("/objects", response_model=list[StoredObjectResponse])
def list_objects(
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """List the caller's objects, newest first."""
    return [StoredObjectResponse.from_ref(ref) for ref in gateway.list_objects(auth)]


@router.get("/objects/{object_id}", response_model=StoredObjectResponse)
def get_object(
    object_id: str,
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    return StoredObjectResponse.from_ref(gateway.get_object(auth, object_id))


@router.patch("/objects/{object_id}", response_model=StoredObjectResponse)
def rename_object(
    object_id: str,
    body: RenameObjectRequest,
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    return StoredObjectResponse.from_ref(gateway.rename(auth, object_id, body.title))


@router.get("/download/{object_id}")
def download_object(
    object_id: str,
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Download an object's full plaintext bytes.

    Use /stream/{object_id} for seekable playback.
    """
    ref, content = gateway.open_stream(auth, object_id)
    return Response(content=content, media_type=ref.content_type)


@router.delete("/{object_id}", status_code=204)
def delete_object(
    object_id: str,
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    gateway.delete(auth, object_id)
    return Response(status_code=204)


@router.get("/signed-url/{object_id}", response_model=SignedUrlResponse)
def get_signed_url(
    object_id: str,
    expiration_seconds: int = Query(default=3600, ge=1),
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Return a temporary URL served directly by the storage backend.

    The expiry is clamped to SIGNED_URL_MAX_TTL. Encrypted objects are
    served as ciphertext through this URL.
    """
    ttl = min(expiration_seconds, gateway.signed_url_max_ttl)
    url = gateway.signed_url(auth, object_id, ttl)
    return SignedUrlResponse(url=url, expires_in=ttl)


@router.get("/preferences", response_model=StoragePreferencesResponse)
def get_preferences(
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    return StoragePreferencesResponse.from_policy(gateway.policy_for(auth.subject_id))


@router.put("/preferences", response_model=StoragePreferencesResponse)
def update_preferences(
    body: UpdateStoragePreferencesRequest,
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Update the caller's storage preferences.

    Switching backends applies to new uploads only; existing objects are
    not migrated.
    """
    policy = gateway.update_policy(auth, **body.model_dump())
    return StoragePreferencesResponse.from_policy(policy)
