"""Unit tests for stored object domain models."""

import pytest
from pydantic import ValidationError

from tunevault_core.domain.storage import (
    BackendKind,
    EncryptionAlgorithm,
    EncryptionEnvelope,
    StoredObjectRef,
)


class TestStoredObjectRef:
    def test_is_encrypted_follows_envelope(self, ref):
        assert ref.is_encrypted is False

        sealed = ref.model_copy(
            update={
                "envelope": EncryptionEnvelope(
                    algorithm=EncryptionAlgorithm.AES_256_GCM, key="a2V5", nonce="bm9uY2U="
                )
            }
        )
        assert sealed.is_encrypted is True

    def test_with_title_replaces_title_and_updated_at(self, ref):
        renamed = ref.with_title("New title")

        assert renamed.title == "New title"
        assert renamed.updated_at >= ref.updated_at
        assert renamed.object_id == ref.object_id
        assert renamed.remote_ref == ref.remote_ref
        assert ref.title == "Old title"

    def test_identity_fields_are_immutable(self, ref):
        with pytest.raises(ValidationError):
            ref.owner_id = "someone-else"

    def test_size_must_be_non_negative(self):
        with pytest.raises(ValidationError):
            StoredObjectRef(
                object_id="obj-1",
                owner_id="user-1",
                backend_kind=BackendKind.LOCAL,
                remote_ref="user-1/obj-1",
                content_type="audio/mpeg",
                size_bytes=-1,
            )


# --- Fixtures ---


@pytest.fixture
def ref():
    return StoredObjectRef(
        object_id="obj-1",
        owner_id="user-1",
        backend_kind=BackendKind.MINIO,
        remote_ref="audio/user-1/obj-1",
        content_type="audio/mpeg",
        size_bytes=1024,
        title="Old title",
    )
