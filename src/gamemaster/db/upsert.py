"""Dialect-specific INSERT constructs for ON CONFLICT upserts."""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def insert_for(db: AsyncSession, table: Any) -> Any:  # noqa: ANN401
    """Return an ``INSERT`` supporting ``on_conflict_do_*`` for the session's backend."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    msg = f"Upserts are not supported on dialect {dialect!r}"
    raise RuntimeError(msg)
