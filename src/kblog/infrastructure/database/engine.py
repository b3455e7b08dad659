"""Database engine setup for SQLite with WAL mode.

One SQLite file per collection, mirroring a file-backed document
database: ``{data_root}/{name}.db``. WAL mode lets readers proceed while
a write is in progress; the store runs its calls in worker threads.

Documents are opaque JSON bodies, so this uses SQLAlchemy Core, not the ORM.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from kblog.infrastructure.database.schema import event_metadata, metadata


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    return engine


def init_collection(db_path: Path) -> Engine:
    """Initialize a collection database at *db_path*.

    Creates parent directories and the ``documents`` table.
    Idempotent: safe to call on an existing collection.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine


def init_event_log(db_path: Path) -> Engine:
    """Initialize the plugin event log database at *db_path*."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    event_metadata.create_all(engine)
    return engine
