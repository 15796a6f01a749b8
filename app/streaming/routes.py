"""
Range-aware audio streaming route.
"""

from __future__ import annotations

import io

from fastapi import APIRouter, Depends, Header

from app.dependencies import get_storage_gateway
from app.storage.services.gateway import StorageGateway
from app.streaming.range_streamer import RangeStreamer
from tunevault_core.auth.dependencies import get_auth_context
from tunevault_core.domain.auth import AuthContext

router = APIRouter()


@router.get("/stream/{object_id}")
def stream_object(
    object_id: str,
    range_header: str | None = Header(default=None, alias="Range"),
    auth: AuthContext = Depends(get_auth_context),
    gateway: StorageGateway = Depends(get_storage_gateway),
):
    """
    Stream one of the caller's objects.

    Answers 200 with the whole object, 206 for a satisfiable ``Range``
    header, or 416 when the range lies outside the object.
    """
    ref, content = gateway.open_stream(auth, object_id)
    streamer = RangeStreamer(io.BytesIO(content), len(content))
    return streamer.build_response(range_header, ref.content_type)
