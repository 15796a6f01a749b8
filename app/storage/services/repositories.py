"""
Metadata stores for stored objects and per-user storage policies.

The gateway depends only on the protocols below. The in-memory
implementations back development and tests; they do not persist across
restarts.
"""

from __future__ import annotations

import threading
from abc import abstractmethod
from typing import Optional, Protocol

from tunevault_core.domain.storage import StoragePolicy, StoredObjectRef


class ObjectMetadataStore(Protocol):
    """Abstract storage interface for StoredObjectRef records."""

    @abstractmethod
    def save(self, ref: StoredObjectRef) -> None:
        """Insert or replace a record."""
        ...

    @abstractmethod
    def get(self, object_id: str) -> Optional[StoredObjectRef]:
        ...

    @abstractmethod
    def delete(self, object_id: str) -> None:
        """Delete a record. Missing ids are ignored."""
        ...

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[StoredObjectRef]:
        """Return an owner's records, newest first."""
        ...


class StoragePolicyStore(Protocol):
    """Abstract storage interface for per-user storage policies."""

    @abstractmethod
    def get(self, owner_id: str) -> Optional[StoragePolicy]:
        ...

    @abstractmethod
    def save(self, policy: StoragePolicy) -> None:
        ...


class InMemoryObjectMetadataStore:
    """
    In-memory object metadata for testing and development.

    Note: Does not persist across restarts.
    """

    def __init__(self):
        self._data: dict[str, StoredObjectRef] = {}
        self._lock = threading.Lock()

    def save(self, ref: StoredObjectRef) -> None:
        with self._lock:
            self._data[ref.object_id] = ref

    def get(self, object_id: str) -> Optional[StoredObjectRef]:
        with self._lock:
            return self._data.get(object_id)

    def delete(self, object_id: str) -> None:
        with self._lock:
            self._data.pop(object_id, None)

    def list_by_owner(self, owner_id: str) -> list[StoredObjectRef]:
        with self._lock:
            refs = [r for r in self._data.values() if r.owner_id == owner_id]
        return sorted(refs, key=lambda r: r.created_at, reverse=True)

    def clear(self) -> None:
        """Clear all data."""
        with self._lock:
            self._data.clear()


class InMemoryStoragePolicyStore:
    """In-memory storage policies. Note: Does not persist across restarts."""

    def __init__(self):
        self._data: dict[str, StoragePolicy] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: str) -> Optional[StoragePolicy]:
        with self._lock:
            return self._data.get(owner_id)

    def save(self, policy: StoragePolicy) -> None:
        with self._lock:
            self._data[policy.owner_id] = policy

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
