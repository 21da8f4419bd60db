"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from .storage import get_blob_store

__all__ = ["get_blob_store"]
