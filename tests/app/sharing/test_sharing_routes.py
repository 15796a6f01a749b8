"""API tests for share link management and anonymous streaming."""

import pytest
from fastapi.testclient import TestClient

from app.sharing.service import ShareLinkService
from app.sharing.store import InMemoryShareLinkStore
from app.storage.services.gateway import StorageGateway
from app.storage.services.repositories import (
    InMemoryObjectMetadataStore,
    InMemoryStoragePolicyStore,
)
from tests.app.storage.fakes import MP3_BYTES, FakeBackendFactory, build_test_app, make_auth
from tunevault_core.auth.credentials import CredentialValidator, create_access_token

SECRET = "sharing-routes-secret-0123456789"


class TestShareLinkManagement:
    def test_create_returns_201(self, client, alice, stored):
        response = client.post(
            "/share-links",
            headers=alice,
            json={"object_id": stored.object_id, "expires_in_hours": 1},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["object_id"] == stored.object_id
        assert data["status"] == "active"
        assert data["token"]

    def test_create_rejects_zero_ttl(self, client, alice, stored):
        response = client.post(
            "/share-links", headers=alice, json={"object_id": stored.object_id, "expires_in_hours": 0}
        )

        assert response.status_code == 422

    def test_create_for_foreign_object_is_403(self, client, bob, stored):
        response = client.post("/share-links", headers=bob, json={"object_id": stored.object_id})

        assert response.status_code == 403

    def test_list_and_get(self, client, alice, stored):
        link_id = create_link(client, alice, stored.object_id)["link_id"]

        listed = client.get("/share-links", headers=alice)
        fetched = client.get(f"/share-links/{link_id}", headers=alice)

        assert [link["link_id"] for link in listed.json()] == [link_id]
        assert fetched.json()["link_id"] == link_id

    def test_revoke(self, client, alice, stored):
        link_id = create_link(client, alice, stored.object_id)["link_id"]

        response = client.delete(f"/share-links/{link_id}", headers=alice)

        assert response.status_code == 200
        assert response.json()["status"] == "revoked"
        assert client.get("/share-links", headers=alice).json() == []

    def test_revoke_by_other_user_is_403(self, client, alice, bob, stored):
        link_id = create_link(client, alice, stored.object_id)["link_id"]

        response = client.delete(f"/share-links/{link_id}", headers=bob)

        assert response.status_code == 403

    def test_management_requires_token(self, client):
        assert client.get("/share-links").status_code == 401


class TestSharedStream:
    def test_anonymous_stream(self, client, alice, stored):
        token = create_link(client, alice, stored.object_id)["token"]

        response = client.get(f"/shared/{token}/stream")

        assert response.status_code == 200
        assert response.content == MP3_BYTES

    def test_anonymous_range(self, client, alice, stored):
        token = create_link(client, alice, stored.object_id)["token"]

        response = client.get(f"/shared/{token}/stream", headers={"Range": "bytes=0-9"})

        assert response.status_code == 206
        assert response.content == MP3_BYTES[:10]

    def test_unknown_token_is_404(self, client):
        response = client.get("/shared/not-a-token/stream")

        assert response.status_code == 404

    def test_revoked_token_is_404(self, client, alice, stored):
        link = create_link(client, alice, stored.object_id)
        client.delete(f"/share-links/{link['link_id']}", headers=alice)

        response = client.get(f"/shared/{link['token']}/stream")

        assert response.status_code == 404

    def test_deleted_object_is_404(self, client, alice, stored):
        token = create_link(client, alice, stored.object_id)["token"]
        client.delete(f"/storage/{stored.object_id}", headers=alice)

        response = client.get(f"/shared/{token}/stream")

        assert response.status_code == 404


# --- Helpers ---


def create_link(client, headers, object_id):
    response = client.post("/share-links", headers=headers, json={"object_id": object_id})
    assert response.status_code == 201
    return response.json()


def bearer(subject: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, secret=SECRET)}"}


# --- Fixtures ---


@pytest.fixture
def gateway():
    return StorageGateway(
        InMemoryObjectMetadataStore(),
        InMemoryStoragePolicyStore(),
        backend_factory=FakeBackendFactory(),
    )


@pytest.fixture
def stored(gateway):
    return gateway.upload(make_auth("alice"), MP3_BYTES, "audio/mpeg")


@pytest.fixture
def client(gateway):
    service = ShareLinkService(InMemoryShareLinkStore(), gateway)
    app = build_test_app(
        gateway,
        share_link_service=service,
        validator=CredentialValidator(signing_secret=SECRET),
    )
    return TestClient(app)


@pytest.fixture
def alice():
    return bearer("alice")


@pytest.fixture
def bob():
    return bearer("bob")
