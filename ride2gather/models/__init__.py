"""Importing this package registers every table with ``Base.metadata``."""

from __future__ import annotations

from .account import Account
from .equipment import Equipment

__all__ = ["Account", "Equipment"]
