"""Unit tests for the local filesystem backend."""

import pytest

from app.storage.services.local_storage import LocalStorage
from tunevault_core.domain.storage import BackendKind


class TestLocalStorage:
    def test_put_then_get(self, storage):
        ref = storage.put("user-1/obj-1", b"audio bytes", "audio/mpeg")

        assert ref == "user-1/obj-1"
        assert storage.get(ref) == b"audio bytes"

    def test_get_missing_raises(self, storage):
        with pytest.raises(FileNotFoundError):
            storage.get("user-1/missing")

    def test_delete_removes_file(self, storage, tmp_path):
        ref = storage.put("user-1/obj-1", b"x", "audio/mpeg")

        storage.delete(ref)

        assert not (tmp_path / "user-1" / "obj-1").exists()

    def test_delete_missing_is_noop(self, storage):
        storage.delete("user-1/missing")

    def test_signed_url_is_file_uri(self, storage):
        ref = storage.put("user-1/obj-1", b"x", "audio/mpeg")

        assert storage.signed_url(ref, 60).startswith("file://")

    def test_rejects_path_escape(self, storage):
        with pytest.raises(ValueError):
            storage.put("../outside", b"x", "audio/mpeg")

    def test_kind(self, storage):
        assert storage.kind is BackendKind.LOCAL


# --- Fixtures ---


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(base_path=str(tmp_path))
