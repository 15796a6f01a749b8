"""
Share link routes.

Owners manage links under /share-links. Link holders stream the shared
object anonymously through /shared/{token}/stream.
"""

from __future__ import annotations

import io
import uuid

from fastapi import APIRouter, Depends, Header, Request
from loguru import logger

from app.dependencies import get_share_link_service, get_storage_gateway
from app.sharing.schemas import CreateShareLinkRequest, ShareLinkResponse
from app.sharing.service import ShareLinkService, delegated_context
from app.storage.services.gateway import StorageGateway
from app.streaming.range_streamer import RangeStreamer
from tunevault_core.auth.dependencies import get_auth_context
from tunevault_core.domain.auth import AuthContext
from tunevault_core.domain.exceptions import ObjectNotFoundError

router = APIRouter()


@router.post("/share-links", response_model=ShareLinkResponse, status_code=201)
def create_share_link(
    body: CreateShareLinkRequest,
    auth: AuthContext = Depends(get_auth_context),
    service: ShareLinkService = Depends(get_share_link_service),
):
    link = service.create(auth, body.object_id, body.expires_in_hours)
    return ShareLinkResponse.from_link(link)


@router.get("/share-links", response_model=list[ShareLinkResponse])
def list_share_links(
    auth: AuthContext = Depends(get_auth_context),
    service: ShareLinkService = Depends(get_share_link_service),
):
    """List the caller's active share links."""
    return [ShareLinkResponse.from_link(link) for link in service.list(auth)]


@router.get("/share-links/{link_id}", response_model=ShareLinkResponse)
def get_share_link(
    link_id: str,
    auth: AuthContext = Depends(get_auth_context),
    service: ShareLinkService = Depends(get_share_link_service),
):
    return ShareLinkResponse.from_link(service.get(auth, link_id))


@router.delete("/share-links/{link_id}", response_model=ShareLinkResponse)
def revoke_share_link(
    link_id: str,
    auth: AuthContext = Depends(get_auth_context),
    service: ShareLinkService = Depends(get_share_link_service),
):
    return ShareLinkResponse.from_link(service.revoke(auth, link_id))


@router.get("/shared/{token}/stream")
def stream_shared_object(
    token: str,
    request: Request,
    range_header: str | None = Header(default=None, alias="Range"),
    service: ShareLinkService = Depends(get_share_link_service),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Stream a shared object without a bearer token.

    Unknown, revoked and expired tokens all answer 404.
    """
    link = service.resolve(token)
    if link is None:
        raise ObjectNotFoundError("Share link not found or expired")

    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    logger.info(f"[{request_id}] Streaming [{link.object_id}] via share link {link.link_id}")

    ref, content = gateway.open_stream(delegated_context(link, request_id), link.object_id)
    streamer = RangeStreamer(io.BytesIO(content), len(content))
    return streamer.build_response(range_header, ref.content_type)
