"""
Unified configuration for the tunevault service.

This module provides a single Settings class that consolidates all
environment variables used by the credential validator, encryption engine,
storage backends and streaming layer.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Unified settings for tunevault.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "tunevault"

    # App host/port
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8081

    # Auth settings
    REQUIRE_AUTH: bool = True  # Set False for local development only
    JWT_SECRET: str = ""
    JWT_ISSUER: str | None = None
    JWT_AUDIENCE: str | None = None
    JWT_ROLE: str | None = None
    JWT_ACCESS_TTL: int = 3600

    # Encryption at rest
    ENCRYPTION_ALGORITHM: str = "AES-256-GCM"  # or "AES-256-CBC"
    DEFAULT_ENCRYPTION_ENABLED: bool = True

    # Storage backends
    DEFAULT_BACKEND: str = "minio"  # google_drive | supabase | minio | local
    BACKEND_TIMEOUT_SECONDS: float = 30.0
    BACKEND_MAX_ATTEMPTS: int = 3

    # MinIO Configuration
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_BUCKET_AUDIO: str = "audio"
    MINIO_SECURE: bool = False

    # Supabase Storage
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_BUCKET: str = "tracks"

    # Google Drive
    GOOGLE_DRIVE_API_URL: str = "https://www.googleapis.com/drive/v3"
    GOOGLE_DRIVE_UPLOAD_URL: str = "https://www.googleapis.com/upload/drive/v3"

    # Local filesystem backend (development)
    LOCAL_STORAGE_PATH: str = "/tmp/tunevault-storage"

    # Upload / streaming limits
    MAX_UPLOAD_BYTES: int = 200 * 1024 * 1024  # 200 MB
    SIGNED_URL_MAX_TTL: int = 7 * 24 * 3600
    STREAM_CHUNK_SIZE: int = 4096
    UPLOAD_RATE_LIMIT: str = "30/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Share links
    SHARE_LINK_DEFAULT_TTL_HOURS: int | None = 24

    # Telemetry
    ENABLE_TELEMETRY: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative frontend
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
