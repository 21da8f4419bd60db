"""SQLAlchemy model for equipment a rider can pick as their primary bike."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base


class Equipment(Base):
    """Named reference record.

    ``name`` is indexed but deliberately not unique: rows are created on
    demand from free-text profile input and two requests may race.
    """

    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False, index=True)
    brand = Column(Text, nullable=True)
    category = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["Equipment"]
