"""Seed the equipment table with a handful of well-known bikes.

Run with ``python -m ride2gather.db.seed`` or set ``SEED_EQUIPMENT=true`` to
seed on startup. Rows are matched by name, so repeated runs add nothing.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..crud.equipment import create_equipment, find_equipment_by_name

logger = logging.getLogger(__name__)

EQUIPMENT_SEED: list[dict[str, str]] = [
    {"name": "YZF-R6", "brand": "Yamaha", "category": "Supersport"},
    {"name": "CBR600RR", "brand": "Honda", "category": "Supersport"},
    {"name": "GSX-R600", "brand": "Suzuki", "category": "Supersport"},
    {"name": "ZX-6R", "brand": "Kawasaki", "category": "Supersport"},
    {"name": "Panigale V2", "brand": "Ducati", "category": "Supersport"},
]


def seed_equipment(db: Session) -> int:
    """Insert missing seed rows and return how many were created."""
    created = 0
    for entry in EQUIPMENT_SEED:
        if find_equipment_by_name(db, entry["name"]) is not None:
            continue
        create_equipment(db, **entry)
        created += 1
    db.commit()
    logger.info("equipment.seeded", extra={"extra_data": {"created": created}})
    return created


def main() -> None:
    from ..core.config import settings
    from ..core.logging import configure_logging
    from .session import Base, SessionLocal, engine
    from .. import models  # noqa: F401

    configure_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_equipment(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
