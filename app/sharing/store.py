"""
Share link storage.

The service depends only on ShareLinkStore. The in-memory implementation is
created once at startup and injected; it does not persist across restarts.
"""

from __future__ import annotations

import threading
from abc import abstractmethod
from typing import Optional, Protocol

from .models import ShareLink


class ShareLinkStore(Protocol):
    """Abstract storage interface for share links."""

    @abstractmethod
    def save(self, link: ShareLink) -> None:
        """Insert or replace a link."""
        ...

    @abstractmethod
    def get(self, link_id: str) -> Optional[ShareLink]:
        ...

    @abstractmethod
    def get_by_token(self, token: str) -> Optional[ShareLink]:
        ...

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> list[ShareLink]:
        ...


class InMemoryShareLinkStore:
    """In-memory share links keyed by id, with a token index."""

    def __init__(self):
        self._links: dict[str, ShareLink] = {}
        self._token_index: dict[str, str] = {}
        self._lock = threading.Lock()

    def save(self, link: ShareLink) -> None:
        with self._lock:
            self._links[link.link_id] = link
            self._token_index[link.token] = link.link_id

    def get(self, link_id: str) -> Optional[ShareLink]:
        with self._lock:
            return self._links.get(link_id)

    def get_by_token(self, token: str) -> Optional[ShareLink]:
        with self._lock:
            link_id = self._token_index.get(token)
            return self._links.get(link_id) if link_id else None

    def list_by_owner(self, owner_id: str) -> list[ShareLink]:
        with self._lock:
            links = [link for link in self._links.values() if link.owner_id == owner_id]
        return sorted(links, key=lambda link: link.created_at, reverse=True)

    def clear(self) -> None:
        """Clear all data."""
        with self._lock:
            self._links.clear()
            self._token_index.clear()
