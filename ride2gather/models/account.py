"""SQLAlchemy model for rider accounts and their profile fields."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Account(Base):
    __tablename__ = "accounts"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    email = Column(Text, nullable=False, unique=True)
    username = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)

    bio = Column(Text, nullable=True, default="")
    avatar_ref = Column(Text, nullable=True)
    country_code = Column(Text, nullable=False, default="")

    primary_equipment_id = Column(
        Integer,
        ForeignKey("equipment.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = Column(Text, nullable=False)
    last_online = Column(Text, nullable=True)

    primary_equipment = relationship("Equipment", lazy="selectin")

    def __repr__(self) -> str:
        # Keeps ``password_hash`` out of logs and tracebacks.
        return f"<Account id={self.id} username={self.username!r}>"


__all__ = ["Account"]
