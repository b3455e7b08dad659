"""SQLite collection databases and schema via SQLAlchemy Core."""

from kblog.infrastructure.database.engine import (
    create_db_engine,
    init_collection,
    init_event_log,
)
from kblog.infrastructure.database.schema import (
    documents,
    event_metadata,
    event_wal,
    field_index_sql,
    metadata,
)

__all__ = [
    "create_db_engine",
    "documents",
    "event_metadata",
    "event_wal",
    "field_index_sql",
    "init_collection",
    "init_event_log",
    "metadata",
]
