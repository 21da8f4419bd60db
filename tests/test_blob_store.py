import io
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from ride2gather.core.errors import BlobTooLarge, ValidationFailure
from ride2gather.services.blob_store import LocalBlobStore


def test_put_writes_file_and_returns_public_url(tmp_path):
    store = LocalBlobStore(root=tmp_path, base_url="http://example.test/", max_bytes=1024)

    reference = store.put("me.png", "image/png", io.BytesIO(b"png-bytes"))

    assert reference.startswith("http://example.test/uploads/")
    assert reference.endswith(".png")
    stored = tmp_path / reference.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"png-bytes"


def test_put_strips_directories_from_filename(tmp_path):
    store = LocalBlobStore(root=tmp_path, base_url="http://example.test", max_bytes=1024)

    reference = store.put("../../etc/avatar.jpg", None, io.BytesIO(b"jpg"))

    name = reference.rsplit("/", 1)[1]
    assert ".." not in name
    assert (tmp_path / name).exists()


def test_put_rejects_oversized_upload_and_cleans_up(tmp_path):
    store = LocalBlobStore(root=tmp_path, base_url="http://example.test", max_bytes=10)

    with pytest.raises(BlobTooLarge) as excinfo:
        store.put("big.png", "image/png", io.BytesIO(b"x" * 11))

    # Oversized uploads are still a validation problem for callers.
    assert isinstance(excinfo.value, ValidationFailure)
    assert excinfo.value.status_code == 413
    assert list(tmp_path.iterdir()) == []


def test_delete_removes_stored_blob_and_stays_inside_root(tmp_path):
    root = tmp_path / "uploads"
    outside = tmp_path / "keep.png"
    outside.write_bytes(b"keep")
    store = LocalBlobStore(root=root, base_url="http://example.test", max_bytes=1024)
    reference = store.put("me.png", "image/png", io.BytesIO(b"png"))

    store.delete(reference)
    store.delete(reference)
    store.delete("http://example.test/uploads/../keep.png")

    assert not any(root.iterdir())
    assert outside.read_bytes() == b"keep"
