"""
Startup schema patch for databases created before Match.version and
Pool.version existed. create_all never alters existing tables, so the
columns are added here. Alembic revision 002 does the same for managed
deployments.
"""
from __future__ import annotations

import logging
from typing import List, Set, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# (name, sqlite_type, postgres_type)
REQUIRED_VERSION_COLUMNS: List[Tuple[str, str, str]] = [
    ("version", "INTEGER NOT NULL DEFAULT 1", "INTEGER NOT NULL DEFAULT 1"),
]

_SQLITE_COLUMNS = "PRAGMA table_info({table});"
_POSTGRES_COLUMNS = """
SELECT column_name
FROM information_schema.columns
WHERE table_schema = 'public' AND table_name = :table_name;
"""


def _is_sqlite(engine: Engine) -> bool:
    return engine.dialect.name.lower() == "sqlite"


def existing_columns(engine: Engine, table: str) -> Set[str]:
    """Column names of a table; empty when the table does not exist."""
    with engine.connect() as conn:
        if _is_sqlite(engine):
            # rows: (cid, name, type, notnull, dflt_value, pk)
            rows = conn.execute(text(_SQLITE_COLUMNS.format(table=table))).fetchall()
            return {str(row[1]) for row in rows}
        rows = conn.execute(text(_POSTGRES_COLUMNS), {"table_name": table}).fetchall()
        return {str(row[0]) for row in rows}


def add_missing_columns(engine: Engine, table: str, columns: List[Tuple[str, str, str]]) -> List[str]:
    """Add any of `columns` the table lacks. Returns the names that were added."""
    present = existing_columns(engine, table)
    if not present:
        # create_all builds the table with every column
        return []

    sqlite = _is_sqlite(engine)
    added: List[str] = []
    with engine.begin() as conn:
        for name, sqlite_type, pg_type in columns:
            if name in present:
                continue
            if sqlite:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {sqlite_type};"))
            else:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {name} {pg_type};"))
            added.append(name)
    return added


def ensure_version_columns(engine: Engine) -> None:
    """Idempotent; safe to run at every startup."""
    from padel_manager.models.match import Match
    from padel_manager.models.pool import Pool

    for model in (Match, Pool):
        table = model.__table__.name
        try:
            added = add_missing_columns(engine, table, REQUIRED_VERSION_COLUMNS)
        except Exception as e:
            # Log error but don't crash the server
            logger.warning("Failed to ensure %s columns: %s", table, e)
            continue
        if added:
            logger.info("Added columns %s to table %s", added, table)
