"""CRUD helpers for equipment records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import ServerFailure
from ..models.equipment import Equipment

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def find_equipment_by_name(db: Session, name: str) -> Equipment | None:
    """Return the oldest equipment row whose name matches exactly.

    Names are not unique, so more than one row may match; the lowest id wins
    to keep the answer stable.
    """
    stmt = select(Equipment).where(Equipment.name == name).order_by(Equipment.id).limit(1)
    try:
        return db.execute(stmt).scalars().first()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("equipment.storage_error", extra={"extra_data": {"name": name}})
        raise ServerFailure(str(exc)) from exc


def create_equipment(
    db: Session,
    *,
    name: str,
    brand: str | None = None,
    category: str | None = None,
) -> Equipment:
    """Insert a new equipment row and flush it so the id is assigned.

    The caller owns the transaction and commits it.
    """
    obj = Equipment(name=name, brand=brand, category=category, created_at=_utcnow())
    db.add(obj)
    try:
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("equipment.storage_error", extra={"extra_data": {"name": name}})
        raise ServerFailure(str(exc)) from exc
    logger.info("equipment.created", extra={"extra_data": {"equipment_id": obj.id, "name": name}})
    return obj
