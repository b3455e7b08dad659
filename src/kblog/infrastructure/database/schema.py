"""SQLAlchemy Core table definitions.

Every collection lives in its own SQLite file holding a single
``documents`` table: the string ``id`` plus the JSON-encoded body.
Field indexes are expression indexes over ``json_extract`` and are
created on demand via raw DDL, since they differ per collection.

The event log used by the plugin event bus lives in a separate file
with the ``event_wal`` table.
"""

from __future__ import annotations

import re

from sqlalchemy import Column, Integer, MetaData, Table, Text

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("id", Text, primary_key=True),
    Column("body", Text, nullable=False),  # JSON object, includes "id"
)

event_metadata = MetaData()

event_wal = Table(
    "event_wal",
    event_metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def field_index_sql(field: str, *, unique: bool) -> str:
    """DDL for an expression index over ``body.<field>``.

    SQLite treats NULLs as distinct in unique indexes, so documents that
    lack the field never collide (sparse behaviour).

    Raises:
        ValueError: If *field* is not a plain identifier.
    """
    if not _FIELD_NAME.match(field):
        msg = f"Invalid index field name: {field!r}"
        raise ValueError(msg)
    kind = "UNIQUE INDEX" if unique else "INDEX"
    prefix = "ux" if unique else "ix"
    return (
        f"CREATE {kind} IF NOT EXISTS {prefix}_documents_{field} "
        f"ON documents (json_extract(body, '$.{field}'))"
    )
