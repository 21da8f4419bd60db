"""Blob storage for uploaded images.

The profile core only ever sees the reference string returned by
``BlobStore.put``; where the bytes end up is this module's business.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import IO, Protocol
from uuid import uuid4

from ..core.errors import BlobTooLarge, ServerFailure, ValidationFailure

logger = logging.getLogger(__name__)

UPLOADS_URL_PATH = "/uploads"
CHUNK_SIZE = 64 * 1024


class BlobStore(Protocol):
    def put(self, filename: str, content_type: str | None, data: IO[bytes]) -> str:
        """Store ``data`` and return a stable, externally fetchable reference."""

        ...

    def delete(self, reference: str) -> None:
        """Drop the blob behind a reference returned by ``put``."""

        ...


class LocalBlobStore:
    """Write blobs to a local directory that is served under ``/uploads``."""

    def __init__(self, root: Path, base_url: str, max_bytes: int) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def _storage_name(self, filename: str) -> str:
        ext = Path(Path(filename or "").name).suffix
        return f"{int(time.time() * 1000)}-{uuid4().hex[:6]}{ext}"

    def put(self, filename: str, content_type: str | None, data: IO[bytes]) -> str:
        if data is None:
            raise ValidationFailure("no file uploaded")
        self.root.mkdir(parents=True, exist_ok=True)
        storage_name = self._storage_name(filename)
        dest_path = self.root / storage_name
        try:
            data.seek(0)
        except (AttributeError, OSError):
            pass

        written = 0
        try:
            with dest_path.open("wb") as buffer:
                while True:
                    chunk = data.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise BlobTooLarge(f"file exceeds the {self.max_bytes} byte limit")
                    buffer.write(chunk)
        except BlobTooLarge:
            dest_path.unlink(missing_ok=True)
            raise
        except OSError as exc:
            dest_path.unlink(missing_ok=True)
            logger.exception("blob.storage_error", extra={"extra_data": {"filename": storage_name}})
            raise ServerFailure(str(exc)) from exc

        logger.info(
            "blob.stored",
            extra={"extra_data": {"filename": storage_name, "size": written, "content_type": content_type}},
        )
        return f"{self.base_url}{UPLOADS_URL_PATH}/{storage_name}"

    def delete(self, reference: str) -> None:
        # Only the final path segment is trusted; anything else stays outside root.
        name = Path(reference.rsplit("/", 1)[-1]).name
        if not name:
            return
        try:
            (self.root / name).unlink(missing_ok=True)
        except OSError:
            logger.exception("blob.delete_error", extra={"extra_data": {"filename": name}})
            return
        logger.info("blob.deleted", extra={"extra_data": {"filename": name}})
