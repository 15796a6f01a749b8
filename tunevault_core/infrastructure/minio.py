"""
MinIO client connector for tunevault.

This module provides a singleton MinIO client shared by every request that
stores objects in MinIO. The client is created once and never mutated.
"""

import urllib3
from loguru import logger
from minio import Minio

from tunevault_core.config import settings


class MinioClientConnector:
    """
    Singleton connector for MinIO object storage.

    Usage:
        client = MinioClientConnector.get_instance()
        client.put_object(bucket_name="audio", ...)
    """

    _instance: Minio | None = None

    @classmethod
    def get_instance(cls) -> Minio:
        """
        Get or create the MinIO client instance.

        Network calls are bounded by settings.BACKEND_TIMEOUT_SECONDS and are
        not retried by the HTTP pool.

        Returns:
            Minio: The MinIO client instance.
        """
        if cls._instance is None:
            timeout = settings.BACKEND_TIMEOUT_SECONDS
            http_client = urllib3.PoolManager(
                timeout=urllib3.Timeout(connect=timeout, read=timeout),
                retries=False,
                maxsize=10,
            )
            try:
                cls._instance = Minio(
                    endpoint=settings.MINIO_ENDPOINT,
                    access_key=settings.MINIO_ACCESS_KEY,
                    secret_key=settings.MINIO_SECRET_KEY,
                    secure=settings.MINIO_SECURE,
                    http_client=http_client,
                )
                logger.info(f"Connected to MinIO at '{settings.MINIO_ENDPOINT}'")
            except Exception as e:
                logger.error(f"Failed to connect to MinIO at '{settings.MINIO_ENDPOINT}': {e}")
                raise

        return cls._instance


def get_minio_client() -> Minio:
    """
    Convenience function to get the MinIO client.

    Returns:
        Minio: The MinIO client instance.
    """
    return MinioClientConnector.get_instance()
