"""Small idempotent schema upgrades for existing SQLite data volumes.

``Base.metadata.create_all`` builds fresh databases. Volumes created by older
builds may be missing columns that were added later; those are added here.
Nothing is ever dropped.
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine


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


def _ensure_columns(engine: Engine, table: str, needed: dict[str, str]) -> bool:
    existing = _column_names(engine, table)
    if not existing:
        # Table absent; create_all owns it.
        return False
    for name, dtype in needed.items():
        if name not in existing:
            _add_column_sqlite(engine, table, f"{name} {dtype}")
    return True


def run_migrations(engine: Engine) -> None:
    """Bring an existing SQLite schema up to what the models expect."""

    if engine.dialect.name != "sqlite":
        return

    if _ensure_columns(
        engine,
        "timers",
        {
            "notes": "TEXT DEFAULT '' NOT NULL",
            "paused_at": "TEXT",
            "created_at": "TEXT DEFAULT '' NOT NULL",
            "updated_at": "TEXT DEFAULT '' NOT NULL",
        },
    ):
        # Backfill bookkeeping stamps so responses never carry empty strings
        with engine.begin() as conn:
            conn.execute(text("UPDATE timers SET created_at = start_time WHERE created_at = ''"))
            conn.execute(text("UPDATE timers SET updated_at = created_at WHERE updated_at = ''"))
        _create_index_if_not_exists(engine, "timers", "ix_timers_owner_unique", ["owner_id"], unique=True)

    if _ensure_columns(engine, "fasts", {"notes": "TEXT", "created_at": "TEXT DEFAULT '' NOT NULL"}):
        with engine.begin() as conn:
            conn.execute(text("UPDATE fasts SET created_at = end_time WHERE created_at = ''"))
        _create_index_if_not_exists(engine, "fasts", "ix_fasts_owner_start", ["owner_id", "start_time"])
