"""Small idempotent schema upgrades for SQLite databases."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine

# Additive only: columns and indexes are created when missing, never dropped.


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    with engine.connect() as conn:
        return conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()


def _column_names(engine: Engine, table: str) -> set[str]:
    return {record["name"] for record in _table_columns(engine, table)}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def run_migrations(engine: Engine) -> None:
    """Bring an older SQLite ``accounts``/``equipment`` schema up to date."""

    if engine.dialect.name != "sqlite":
        return

    account_needed: dict[str, str] = {
        "created_at": "TEXT",
        "bio": "TEXT DEFAULT ''",
        "avatar_ref": "TEXT",
        "country_code": "TEXT DEFAULT '' NOT NULL",
        "primary_equipment_id": "INTEGER REFERENCES equipment(id) ON DELETE SET NULL",
        "last_online": "TEXT",
    }

    acols = _column_names(engine, "accounts")
    if acols:
        for name, dtype in account_needed.items():
            if name not in acols:
                _add_column_sqlite(engine, "accounts", f"{name} {dtype}")
        with engine.begin() as conn:
            conn.execute(text("UPDATE accounts SET last_online = created_at WHERE last_online IS NULL"))
        # Registration relies on these to settle concurrent signups.
        _create_index_if_not_exists(engine, "accounts", "ix_accounts_email_unique", ["email"], unique=True)
        _create_index_if_not_exists(engine, "accounts", "ix_accounts_username_unique", ["username"], unique=True)

    ecols = _column_names(engine, "equipment")
    if ecols:
        for name in ("brand", "category"):
            if name not in ecols:
                _add_column_sqlite(engine, "equipment", f"{name} TEXT")
        _create_index_if_not_exists(engine, "equipment", "ix_equipment_name", ["name"])
