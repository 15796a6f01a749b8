"""
Process-wide service instances handed to routes through FastAPI Depends.

Each instance is constructed lazily on first use to avoid side effects at
import, then shared for the life of the process. Tests replace them with
``app.dependency_overrides``.
"""

from __future__ import annotations

from app.sharing.service import ShareLinkService
from app.sharing.store import InMemoryShareLinkStore, ShareLinkStore
from app.storage.services.gateway import StorageGateway
from app.storage.services.repositories import (
    InMemoryObjectMetadataStore,
    InMemoryStoragePolicyStore,
    ObjectMetadataStore,
    StoragePolicyStore,
)
from tunevault_core.crypto import EncryptionEngine

_metadata_store: ObjectMetadataStore | None = None
_policy_store: StoragePolicyStore | None = None
_share_link_store: ShareLinkStore | None = None
_encryption_engine: EncryptionEngine | None = None
_storage_gateway: StorageGateway | None = None
_share_link_service: ShareLinkService | None = None


def get_metadata_store() -> ObjectMetadataStore:
    global _metadata_store
    if _metadata_store is None:
        _metadata_store = InMemoryObjectMetadataStore()
    return _metadata_store


def get_policy_store() -> StoragePolicyStore:
    global _policy_store
    if _policy_store is None:
        _policy_store = InMemoryStoragePolicyStore()
    return _policy_store


def get_share_link_store() -> ShareLinkStore:
    global _share_link_store
    if _share_link_store is None:
        _share_link_store = InMemoryShareLinkStore()
    return _share_link_store


def get_encryption_engine() -> EncryptionEngine:
    global _encryption_engine
    if _encryption_engine is None:
        _encryption_engine = EncryptionEngine()
    return _encryption_engine


def get_storage_gateway() -> StorageGateway:
    """Lazily construct the storage gateway."""
    global _storage_gateway
    if _storage_gateway is None:
        _storage_gateway = StorageGateway(
            metadata_store=get_metadata_store(),
            policy_store=get_policy_store(),
            engine=get_encryption_engine(),
        )
    return _storage_gateway


def get_share_link_service() -> ShareLinkService:
    global _share_link_service
    if _share_link_service is None:
        _share_link_service = ShareLinkService(
            store=get_share_link_store(), gateway=get_storage_gateway()
        )
    return _share_link_service


def init_services() -> None:
    """Build every shared instance up front (called at application startup)."""
    get_storage_gateway()
    get_share_link_service()
