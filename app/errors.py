"""
Exception handlers for the FastAPI application.

Every ServiceError is rendered as ``{"code", "message", "debug_id"}`` with
the status code its class declares. Debug details stay in the logs.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from tunevault_core.domain.exceptions import AuthError, RangeNotSatisfiableError
from tunevault_core.runtime.errors import ServiceError


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    headers: dict[str, str] = {}
    if isinstance(exc, RangeNotSatisfiableError):
        headers["Content-Range"] = f"bytes */{exc.total_length}"
    elif isinstance(exc, AuthError):
        headers["WWW-Authenticate"] = "Bearer"

    request_id = getattr(request.state, "request_id", "-")
    summary = f"[{request_id}] {request.method} {request.url.path} -> {exc.status_code} {exc!s}"
    if exc.status_code >= 500:
        logger.error(f"{summary} (debug_id={exc.debug_id}, detail={exc.message_debug})")
    else:
        logger.info(summary)

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
