from __future__ import annotations

from fastapi import Request

from ..core.config import settings
from ..services.blob_store import BlobStore, LocalBlobStore


def get_blob_store(request: Request) -> BlobStore:
    base_url = settings.PUBLIC_BASE_URL or str(request.base_url)
    return LocalBlobStore(root=settings.uploads_dir, base_url=base_url, max_bytes=settings.MAX_UPLOAD_BYTES)
