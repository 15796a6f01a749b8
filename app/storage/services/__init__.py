# Storage services

from .factory import get_storage_backend
from .gateway import StorageGateway
from .google_drive_storage import GoogleDriveStorage
from .local_storage import LocalStorage
from .minio_storage import MinIOStorage
from .repositories import (
    InMemoryObjectMetadataStore,
    InMemoryStoragePolicyStore,
    ObjectMetadataStore,
    StoragePolicyStore,
)
from .storage_protocol import StorageBackend
from .supabase_storage import SupabaseStorage

__all__ = [
    # Gateway
    "StorageGateway",
    # Storage backends
    "StorageBackend",
    "MinIOStorage",
    "SupabaseStorage",
    "GoogleDriveStorage",
    "LocalStorage",
    "get_storage_backend",
    # Metadata stores
    "ObjectMetadataStore",
    "StoragePolicyStore",
    "InMemoryObjectMetadataStore",
    "InMemoryStoragePolicyStore",
]
