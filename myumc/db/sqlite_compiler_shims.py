"""SQLite compilation shims for PostgreSQL-specific SQLAlchemy types.

Test runs substitute an in-memory SQLite database for PostgreSQL. JSONB is
rendered as SQLite's JSON affinity so `Base.metadata.create_all()` succeeds;
JSONB operators are not emulated and application queries avoid them.

Imported for side-effects by myumc.db.models.
"""
from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(element, compiler, **kw):  # pragma: no cover - trivial
    return "JSON"
