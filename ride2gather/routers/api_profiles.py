"""HTTP routes that change an existing account's profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ..core.errors import NotFoundFailure, ServiceError, ValidationFailure
from ..crud.accounts import get_account
from ..crud.profiles import update_avatar, update_profile
from ..db.session import get_db
from ..deps import get_blob_store
from ..middlewares import bind_account
from ..schemas.account import AvatarOut, ProfileOut, ProfileUpdate
from ..services.blob_store import BlobStore

router = APIRouter(prefix="/user", tags=["profiles"])

AVATAR_FIELD = "pfp"


@router.patch("/{account_id}", response_model=ProfileOut)
def api_update_profile(account_id: int, payload: ProfileUpdate, db: Session = Depends(get_db)):
    bind_account(account_id)
    return update_profile(db, account_id, payload.model_dump(exclude_unset=True))


@router.post("/{account_id}/pfp", response_model=AvatarOut)
def api_upload_avatar(
    account_id: int,
    pfp: UploadFile | None = File(default=None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    bind_account(account_id)
    if pfp is None or not (pfp.filename or "").strip():
        raise ValidationFailure(f'no file uploaded (field name must be "{AVATAR_FIELD}")')
    # Check before writing so unknown ids do not leave orphaned files behind.
    if get_account(db, account_id) is None:
        raise NotFoundFailure("User not found")
    try:
        reference = store.put(pfp.filename, pfp.content_type, pfp.file)
    finally:
        pfp.file.close()
    try:
        return update_avatar(db, account_id, reference)
    except ServiceError:
        # The account row never points at these bytes, so drop them.
        store.delete(reference)
        raise
