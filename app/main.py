"""
FastAPI application for tunevault.

Serves authenticated users' audio files: uploads with optional encryption
at rest, backend-agnostic storage, range-aware streaming and share links.

Usage:
    uvicorn app.main:app --reload --port 8081
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.dependencies import init_services
from app.errors import register_exception_handlers
from app.sharing.routes import router as sharing_router
from app.storage.routes import router as storage_router
from app.streaming.routes import router as streaming_router
from tunevault_core.auth.middleware import AuthMiddleware
from tunevault_core.config import settings
from tunevault_core.infrastructure.http import HttpClientConnector
from tunevault_core.infrastructure.rate_limiter import _rate_limit_exceeded_handler, limiter
from tunevault_core.infrastructure.telemetry import TelemetryService, setup_telemetry
from tunevault_core.logging import setup_logging

# Initialize logging
setup_logging()

# Initialize Telemetry (Tracing/Metrics)
setup_telemetry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_services()
    yield
    HttpClientConnector.close()


app = FastAPI(
    title="tunevault",
    description="Audio storage with encryption at rest and range-aware streaming",
    version="1.0.0",
    lifespan=lifespan,
)

# Instrument FastAPI app
TelemetryService().instrument_app(app)

# Rate limiter setup
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

register_exception_handlers(app)

# Auth middleware (REQUIRE_AUTH=false injects a development principal)
app.add_middleware(AuthMiddleware, require_auth=settings.REQUIRE_AUTH)

# NOTE: CORS must be the last middleware added so it runs FIRST
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
)


app.include_router(storage_router, tags=["Storage"])
app.include_router(streaming_router, tags=["Streaming"])
app.include_router(sharing_router, tags=["Sharing"])


@app.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
        dict: Status and service information.
    """
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": "1.0.0"}
