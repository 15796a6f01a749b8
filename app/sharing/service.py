"""
Share link service.

Owners mint links for their own objects; anyone holding a link's token can
stream the object anonymously until the link is revoked or expires. Streams
through a link run as the link's owner, so the storage gateway's ownership
check still applies.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import timedelta

from loguru import logger

from app.storage.services.gateway import StorageGateway
from tunevault_core.config import settings
from tunevault_core.domain.auth import AuthContext, Principal
from tunevault_core.domain.exceptions import ForbiddenError, ObjectNotFoundError
from tunevault_core.domain.storage import utcnow

from .models import ShareLink, ShareLinkStatus
from .store import ShareLinkStore

SHARE_LINK_ROLE = "share-link"


class ShareLinkService:
    """
    Create, list, revoke and resolve share links.

    Usage:
        service = ShareLinkService(store, gateway)
        link = service.create(auth, object_id, expires_in_hours=48)
        service.resolve(link.token)
    """

    def __init__(self, store: ShareLinkStore, gateway: StorageGateway):
        self.store = store
        self.gateway = gateway

    def create(
        self,
        auth: AuthContext,
        object_id: str,
        expires_in_hours: int | None = None,
    ) -> ShareLink:
        """
        Create a link to one of the caller's objects.

        Args:
            auth: Caller context; must own the object.
            object_id: Object to share.
            expires_in_hours: Lifetime of the link. Defaults to
                SHARE_LINK_DEFAULT_TTL_HOURS; when both are None the link
                never expires.

        Raises:
            ObjectNotFoundError: Unknown object.
            ForbiddenError: The caller does not own the object.
        """
        self.gateway.get_object(auth, object_id)

        hours = expires_in_hours if expires_in_hours is not None else settings.SHARE_LINK_DEFAULT_TTL_HOURS
        now = utcnow()
        link = ShareLink(
            link_id=str(uuid.uuid4()),
            owner_id=auth.subject_id,
            object_id=object_id,
            token=secrets.token_urlsafe(32),
            created_at=now,
            expires_at=now + timedelta(hours=hours) if hours else None,
        )
        self.store.save(link)

        logger.info(
            f"[{auth.request_id}] Created share link {link.link_id} for [{object_id}]"
        )
        return link

    def list(self, auth: AuthContext) -> list[ShareLink]:
        """Return the caller's links that are still usable."""
        now = utcnow()
        return [
            link
            for link in self.store.list_by_owner(auth.subject_id)
            if link.status is ShareLinkStatus.ACTIVE and not link.is_expired(now)
        ]

    def get(self, auth: AuthContext, link_id: str) -> ShareLink:
        link = self.store.get(link_id)
        if link is None:
            raise ObjectNotFoundError("Share link not found")
        if link.owner_id != auth.subject_id:
            raise ForbiddenError("Not authorized to manage this share link")
        return link

    def revoke(self, auth: AuthContext, link_id: str) -> ShareLink:
        link = self.get(auth, link_id).with_status(ShareLinkStatus.REVOKED)
        self.store.save(link)

        logger.info(f"[{auth.request_id}] Revoked share link {link_id}")
        return link

    def resolve(self, token: str) -> ShareLink | None:
        """
        Return the active link for a token, or None.

        An active link found past its expiry is marked expired.
        """
        link = self.store.get_by_token(token)
        if link is None or link.status is not ShareLinkStatus.ACTIVE:
            return None

        if link.is_expired():
            self.store.save(link.with_status(ShareLinkStatus.EXPIRED))
            logger.info(f"Share link {link.link_id} expired")
            return None

        return link


def delegated_context(link: ShareLink, request_id: str) -> AuthContext:
    """Build the context used to read an object on behalf of a link's owner."""
    return AuthContext(
        principal=Principal(
            subject_id=link.owner_id,
            display_label=f"share-link:{link.link_id}",
            roles=frozenset({SHARE_LINK_ROLE}),
        ),
        authenticated_at=utcnow(),
        request_id=request_id,
    )
