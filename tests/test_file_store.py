"""
Test the local upload store.
"""

import pytest

from bmvt.core.config import settings
from bmvt.core.errors import ValidationError
from bmvt.services.file_store import FileStore


@pytest.fixture
def store():
    return FileStore("tests")


class TestFileStore:
    def test_store_sanitizes_name(self, store):
        public_path = store.store("photo", "../Mon Passeport (1).JPG", b"data")

        assert public_path.startswith("/uploads/tests/")
        assert public_path.endswith("_Mon_Passeport_1.jpg")
        assert store.resolve(public_path).read_bytes() == b"data"

    def test_store_without_name(self, store):
        public_path = store.store("photo", "", b"data")

        assert public_path.endswith("_file")

    def test_same_name_twice_gives_two_files(self, store):
        first = store.store("photo", "a.png", b"1")
        second = store.store("photo", "a.png", b"2")

        assert first != second
        assert store.resolve(first).read_bytes() == b"1"

    def test_oversize_file_rejected(self, store, monkeypatch):
        monkeypatch.setattr(settings, "max_file_size_mb", 1)

        with pytest.raises(ValidationError) as exc_info:
            store.store("photo", "big.jpg", b"x" * (1024 * 1024 + 1))

        assert exc_info.value.message == "Fichier trop volumineux (max 1 Mo)."

    def test_resolve_refuses_foreign_paths(self, store):
        assert store.resolve(None) is None
        assert store.resolve("https://cdn.example.com/a.jpg") is None
        assert store.resolve("/uploads/pelerins/a.jpg") is None
        assert store.resolve("/uploads/tests/../pelerins/a.jpg") is None

    def test_remove_is_idempotent(self, store):
        public_path = store.store("photo", "a.png", b"1")

        store.remove(public_path)
        store.remove(public_path)
        store.remove_many([None, "", "/uploads/other/x.png"])

        assert not store.resolve(public_path).exists()
