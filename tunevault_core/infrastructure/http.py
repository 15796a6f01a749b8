"""
Shared HTTP client for REST storage backends.

The Google Drive adapter talks to the Drive API through one
pooled httpx.Client created at first use. Every request is bounded by
settings.BACKEND_TIMEOUT_SECONDS.
"""

from __future__ import annotations

import httpx
from loguru import logger

from tunevault_core.config import settings


class HttpClientConnector:
    """
    Singleton connector for the pooled backend HTTP client.

    Usage:
        client = HttpClientConnector.get_instance()
        response = client.get(url, headers=...)
    """

    _instance: httpx.Client | None = None

    @classmethod
    def get_instance(cls) -> httpx.Client:
        """
        Get or create the shared httpx.Client.

        Returns:
            httpx.Client: The pooled client.
        """
        if cls._instance is None:
            cls._instance = httpx.Client(
                timeout=httpx.Timeout(settings.BACKEND_TIMEOUT_SECONDS),
                limits=httpx.Limits(
                    max_connections=100,
                    max_keepalive_connections=20,
                    keepalive_expiry=30.0,
                ),
            )
            logger.info(
                f"Backend HTTP client ready (timeout={settings.BACKEND_TIMEOUT_SECONDS}s)"
            )
        return cls._instance

    @classmethod
    def close(cls) -> None:
        """Close the shared client and release connections."""
        if cls._instance is not None:
            cls._instance.close()
            cls._instance = None


def get_http_client() -> httpx.Client:
    """Convenience function to get the shared backend HTTP client."""
    return HttpClientConnector.get_instance()
