"""
Unit tests for StorageGateway.

The gateway should:
1. Sniff uploads and reject anything that is not audio
2. Encrypt according to the owner's policy and store the envelope
3. Write metadata only after the backend confirms the put
4. Check ownership before touching any backend
5. Map backend failures to BackendFailureError
6. Drop the metadata when the remote blob is already gone
"""

from unittest.mock import MagicMock

import httpx
import pytest

from app.storage.services.gateway import ENCRYPTED_CONTENT_TYPE, StorageGateway
from app.storage.services.google_drive_storage import GoogleDriveStorage
from app.storage.services.repositories import (
    InMemoryObjectMetadataStore,
    InMemoryStoragePolicyStore,
)
from tests.app.storage.fakes import (
    MP3_BYTES,
    TEXT_BYTES,
    WAV_BYTES,
    FakeBackendFactory,
    make_auth,
)
from tunevault_core.crypto import EncryptionEngine
from tunevault_core.domain.exceptions import (
    AuthenticationFailedError,
    BackendFailureError,
    BackendNotConnectedError,
    ForbiddenError,
    ObjectNotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
)
from tunevault_core.domain.storage import BackendKind, StoragePolicy
from tunevault_core.runtime import RetryPolicy


class TestUpload:
    """Tests for the write path."""

    def test_upload_returns_ref_with_sniffed_type(self, gateway, owner):
        ref = gateway.upload(owner, MP3_BYTES, "application/octet-stream", "Demo")

        assert ref.owner_id == "user-1"
        assert ref.content_type == "audio/mpeg"
        assert ref.size_bytes == len(MP3_BYTES)
        assert ref.title == "Demo"

    def test_declared_type_is_not_trusted(self, gateway, owner, factory):
        """A text payload declared as audio/mpeg is rejected."""
        with pytest.raises(UnsupportedMediaTypeError):
            gateway.upload(owner, TEXT_BYTES, "audio/mpeg")

        assert factory.requests == []

    def test_empty_payload_rejected(self, gateway, owner):
        with pytest.raises(UnsupportedMediaTypeError):
            gateway.upload(owner, b"", "audio/mpeg")

    def test_oversize_payload_rejected(self, metadata_store, policy_store, factory, owner):
        gateway = StorageGateway(
            metadata_store, policy_store, backend_factory=factory, max_upload_bytes=100
        )

        with pytest.raises(PayloadTooLargeError) as exc_info:
            gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert exc_info.value.status_code == 413

    def test_encrypts_when_policy_enables_it(self, gateway, owner, factory):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        backend = factory.backends[ref.backend_kind]
        stored = backend.blobs[ref.remote_ref]
        assert ref.envelope is not None
        assert stored != MP3_BYTES
        assert backend.content_types[ref.remote_ref] == ENCRYPTED_CONTENT_TYPE

    def test_stores_plaintext_when_encryption_disabled(self, gateway, owner, policy_store, factory):
        policy_store.save(
            StoragePolicy(owner_id="user-1", encryption_enabled=False, backend_kind=BackendKind.SUPABASE)
        )

        ref = gateway.upload(owner, WAV_BYTES, "audio/wav")

        assert ref.envelope is None
        assert ref.backend_kind is BackendKind.SUPABASE
        assert factory.backends[BackendKind.SUPABASE].blobs[ref.remote_ref] == WAV_BYTES

    def test_backend_failure_creates_no_metadata(self, gateway, owner, factory, metadata_store):
        factory(BackendKind.MINIO).fail_on.add("put")

        with pytest.raises(BackendFailureError):
            gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert metadata_store.list_by_owner("user-1") == []

    def test_metadata_failure_propagates(self, policy_store, factory, owner):
        failing_store = MagicMock()
        failing_store.save.side_effect = RuntimeError("db down")
        gateway = StorageGateway(failing_store, policy_store, backend_factory=factory)

        with pytest.raises(RuntimeError):
            gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        # Blob stays behind for manual cleanup
        assert len(factory.backends[BackendKind.MINIO].blobs) == 1

    def test_object_ids_are_unique(self, gateway, owner):
        first = gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        second = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert first.object_id != second.object_id


class TestDownload:
    """Tests for the read path."""

    def test_round_trip_encrypted(self, gateway, owner):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert gateway.download(owner, ref.object_id) == MP3_BYTES

    def test_round_trip_plaintext(self, gateway, owner, policy_store):
        policy_store.save(
            StoragePolicy(owner_id="user-1", encryption_enabled=False, backend_kind=BackendKind.LOCAL)
        )
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert gateway.download(owner, ref.object_id) == MP3_BYTES

    def test_non_owner_gets_forbidden(self, gateway, owner, stranger):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        with pytest.raises(ForbiddenError):
            gateway.download(stranger, ref.object_id)

    def test_non_owner_forbidden_without_backend_access(self, gateway, owner, stranger, factory):
        """Ownership is checked before the backend, even if the blob is gone."""
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        backend = factory.backends[ref.backend_kind]
        backend.blobs.clear()
        backend.calls.clear()

        with pytest.raises(ForbiddenError):
            gateway.download(stranger, ref.object_id)

        assert backend.calls == []

    def test_unknown_id_is_not_found(self, gateway, owner):
        with pytest.raises(ObjectNotFoundError):
            gateway.download(owner, "no-such-object")

    def test_tampered_ciphertext_fails(self, gateway, owner, factory):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        backend = factory.backends[ref.backend_kind]
        blob = bytearray(backend.blobs[ref.remote_ref])
        blob[10] ^= 0xFF
        backend.blobs[ref.remote_ref] = bytes(blob)

        with pytest.raises(AuthenticationFailedError):
            gateway.download(owner, ref.object_id)

    def test_reads_from_recorded_backend_after_policy_switch(self, gateway, owner, policy_store, factory):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        policy_store.save(
            StoragePolicy(owner_id="user-1", encryption_enabled=True, backend_kind=BackendKind.SUPABASE)
        )
        factory.requests.clear()

        assert gateway.download(owner, ref.object_id) == MP3_BYTES
        assert factory.requests == [BackendKind.MINIO]

    def test_missing_blob_is_backend_failure(self, gateway, owner, factory):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        factory.backends[ref.backend_kind].blobs.clear()

        with pytest.raises(BackendFailureError) as exc_info:
            gateway.download(owner, ref.object_id)

        assert exc_info.value.retryable is True
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_open_stream_returns_metadata(self, gateway, owner):
        ref = gateway.upload(owner, WAV_BYTES, "audio/wav")

        streamed_ref, content = gateway.open_stream(owner, ref.object_id)

        assert streamed_ref.content_type == ref.content_type
        assert content == WAV_BYTES


class TestDelete:
    def test_delete_removes_blob_then_metadata(self, gateway, owner, factory, metadata_store):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        gateway.delete(owner, ref.object_id)

        assert ref.remote_ref not in factory.backends[ref.backend_kind].blobs
        assert metadata_store.get(ref.object_id) is None

    def test_remote_failure_keeps_metadata(self, gateway, owner, factory, metadata_store):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        factory.backends[ref.backend_kind].fail_on.add("delete")

        with pytest.raises(BackendFailureError):
            gateway.delete(owner, ref.object_id)

        assert metadata_store.get(ref.object_id) is not None

    def test_blob_already_gone_still_removes_metadata(self, metadata_store, policy_store, owner):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, json={"id": "drive-file-1"})
            return httpx.Response(404, json={"error": {"code": 404, "message": "File not found"}})

        gateway = drive_gateway(metadata_store, policy_store, handler)
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        gateway.delete(owner, ref.object_id)

        assert metadata_store.get(ref.object_id) is None
        with pytest.raises(ObjectNotFoundError):
            gateway.delete(owner, ref.object_id)

    def test_non_owner_cannot_delete(self, gateway, owner, stranger):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        with pytest.raises(ForbiddenError):
            gateway.delete(stranger, ref.object_id)


class TestRemoteTimeouts:
    def test_timeout_is_retryable_backend_failure_sent_once(self, metadata_store, policy_store, owner):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        gateway = drive_gateway(metadata_store, policy_store, handler)

        with pytest.raises(BackendFailureError) as exc_info:
            gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert exc_info.value.status_code == 502
        assert exc_info.value.retryable is True
        assert len(requests) == 1
        assert metadata_store.list_by_owner("user-1") == []


class TestSignedUrl:
    def test_ttl_is_clamped(self, metadata_store, policy_store, factory, owner):
        gateway = StorageGateway(
            metadata_store, policy_store, backend_factory=factory, signed_url_max_ttl=600
        )
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        url = gateway.signed_url(owner, ref.object_id, 86400)

        assert url.endswith("ttl=600")

    def test_non_owner_forbidden(self, gateway, owner, stranger):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        with pytest.raises(ForbiddenError):
            gateway.signed_url(stranger, ref.object_id, 60)


class TestMetadataOperations:
    def test_list_returns_only_callers_objects(self, gateway, owner, stranger):
        gateway.upload(owner, MP3_BYTES, "audio/mpeg")
        gateway.upload(stranger, WAV_BYTES, "audio/wav")

        listed = gateway.list_objects(owner)

        assert [r.owner_id for r in listed] == ["user-1"]

    def test_rename_updates_title(self, gateway, owner, metadata_store):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg", "Old")

        renamed = gateway.rename(owner, ref.object_id, "New")

        assert renamed.title == "New"
        assert metadata_store.get(ref.object_id).title == "New"
        assert renamed.envelope == ref.envelope

    def test_get_object_checks_ownership(self, gateway, owner, stranger):
        ref = gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        with pytest.raises(ForbiddenError):
            gateway.get_object(stranger, ref.object_id)


class TestPolicy:
    def test_defaults_from_settings(self, gateway, monkeypatch):
        from tunevault_core.config import settings

        monkeypatch.setattr(settings, "DEFAULT_BACKEND", "local")
        monkeypatch.setattr(settings, "DEFAULT_ENCRYPTION_ENABLED", False)

        policy = gateway.policy_for("new-user")

        assert policy.backend_kind is BackendKind.LOCAL
        assert policy.encryption_enabled is False

    def test_update_keeps_unset_fields(self, gateway, owner):
        gateway.update_policy(owner, backend_kind=BackendKind.GOOGLE_DRIVE, drive_access_token="tok")

        policy = gateway.update_policy(owner, encryption_enabled=False, backend_kind=None)

        assert policy.backend_kind is BackendKind.GOOGLE_DRIVE
        assert policy.drive_access_token == "tok"
        assert policy.encryption_enabled is False

    def test_drive_without_token_rejected(self, gateway, owner, policy_store):
        with pytest.raises(BackendNotConnectedError) as exc_info:
            gateway.update_policy(owner, backend_kind=BackendKind.GOOGLE_DRIVE)

        assert exc_info.value.status_code == 409
        assert policy_store.get("user-1") is None

    def test_upload_to_unconnected_drive_is_conflict(self, metadata_store, policy_store, owner):
        from app.storage.services.factory import get_storage_backend

        policy_store.save(
            StoragePolicy(
                owner_id="user-1",
                encryption_enabled=False,
                backend_kind=BackendKind.GOOGLE_DRIVE,
            )
        )
        gateway = StorageGateway(metadata_store, policy_store, backend_factory=get_storage_backend)

        with pytest.raises(BackendNotConnectedError) as exc_info:
            gateway.upload(owner, MP3_BYTES, "audio/mpeg")

        assert exc_info.value.status_code == 409
        assert metadata_store.list_by_owner("user-1") == []


# --- Helpers ---


def drive_gateway(metadata_store, policy_store, handler) -> StorageGateway:
    """Gateway whose owner stores on a Drive adapter served by ``handler``."""
    client = httpx.Client(transport=httpx.MockTransport(handler))
    policy_store.save(
        StoragePolicy(
            owner_id="user-1",
            encryption_enabled=False,
            backend_kind=BackendKind.GOOGLE_DRIVE,
            drive_access_token="drive-token",
        )
    )

    def factory(kind, policy=None):
        return GoogleDriveStorage(
            access_token=policy.drive_access_token,
            client=client,
            retry_policy=RetryPolicy(max_attempts=3, base_delay=0.0, jitter=False),
        )

    return StorageGateway(metadata_store, policy_store, backend_factory=factory)


# --- Fixtures ---


@pytest.fixture
def metadata_store():
    return InMemoryObjectMetadataStore()


@pytest.fixture
def policy_store():
    return InMemoryStoragePolicyStore()


@pytest.fixture
def factory():
    return FakeBackendFactory()


@pytest.fixture
def gateway(metadata_store, policy_store, factory, monkeypatch):
    from tunevault_core.config import settings

    monkeypatch.setattr(settings, "DEFAULT_BACKEND", "minio")
    monkeypatch.setattr(settings, "DEFAULT_ENCRYPTION_ENABLED", True)
    return StorageGateway(
        metadata_store,
        policy_store,
        engine=EncryptionEngine("AES-256-GCM"),
        backend_factory=factory,
    )


@pytest.fixture
def owner():
    return make_auth("user-1")


@pytest.fixture
def stranger():
    return make_auth("user-2", request_id="req-2")
