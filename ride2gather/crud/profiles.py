"""Profile updates and equipment resolution for existing accounts."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import NotFoundFailure, ServerFailure, ValidationFailure
from ..models.account import Account
from ..models.equipment import Equipment
from .accounts import get_account
from .equipment import create_equipment, find_equipment_by_name

logger = logging.getLogger(__name__)

EQUIPMENT_KEYS = ("equipment_name", "bike_name")


def _require_account(db: Session, account_id: int) -> Account:
    account = get_account(db, account_id)
    if account is None:
        raise NotFoundFailure("User not found")
    return account


def _commit(db: Session, account: Account, event: str) -> Account:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"{event}.storage_error", extra={"extra_data": {"account_id": account.id}})
        raise ServerFailure(str(exc)) from exc
    db.refresh(account)
    return account


def resolve_equipment(db: Session, name: str) -> Equipment:
    """Find equipment by exact (trimmed) name, creating it when missing.

    This is a lookup followed by a separate insert, not an atomic upsert.
    ``equipment.name`` carries no unique constraint, so two concurrent calls
    introducing the same new name can both insert; both succeed and the
    table ends up with two rows of that name. Serial calls always reuse the
    first row.
    """
    clean = name.strip()
    if not clean:
        raise ValidationFailure("equipment name must not be blank")
    existing = find_equipment_by_name(db, clean)
    if existing is not None:
        return existing
    return create_equipment(db, name=clean)


def update_profile(db: Session, account_id: int, payload: dict) -> Account:
    """Apply a partial profile update.

    Only keys present in ``payload`` are touched. ``equipment_name`` (or its
    older alias ``bike_name``) set to ``None`` or a blank string clears the
    link without deleting the equipment row.
    """
    account = _require_account(db, account_id)

    if "bio" in payload:
        bio = payload["bio"]
        if bio is not None and not isinstance(bio, str):
            raise ValidationFailure("bio must be a string")
        account.bio = bio or ""

    equipment_key = next((key for key in EQUIPMENT_KEYS if key in payload), None)
    if equipment_key is not None:
        raw = payload[equipment_key]
        if raw is not None and not isinstance(raw, str):
            raise ValidationFailure(f"{equipment_key} must be a string")
        if raw is None or not raw.strip():
            account.primary_equipment_id = None
        else:
            account.primary_equipment_id = resolve_equipment(db, raw).id

    account = _commit(db, account, "profile")
    logger.info(
        "profile.updated",
        extra={
            "extra_data": {
                "account_id": account.id,
                "fields": sorted(payload.keys()),
                "primary_equipment_id": account.primary_equipment_id,
            }
        },
    )
    return account


def update_avatar(db: Session, account_id: int, blob_reference: str) -> Account:
    """Store a reference to an already-uploaded avatar image."""
    account = _require_account(db, account_id)
    if not isinstance(blob_reference, str) or not blob_reference.strip():
        raise ValidationFailure("avatar reference must be a non-empty string")
    account.avatar_ref = blob_reference
    account = _commit(db, account, "avatar")
    logger.info("avatar.updated", extra={"extra_data": {"account_id": account.id}})
    return account
