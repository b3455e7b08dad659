"""DocumentStore: file-backed, per-collection document database.

Each store owns one SQLite file and exposes an async CRUD surface. The
blocking SQLAlchemy work runs in a worker thread via
:func:`asyncio.to_thread`, so every call is a suspension point for the
caller's task while the event loop keeps serving other requests.

Read-modify-write operations (update, patch, remove) run inside a single
``engine.begin()`` transaction.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, literal_column, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from kblog.infrastructure.database.engine import init_collection
from kblog.infrastructure.database.schema import documents, field_index_sql
from kblog.infrastructure.query import QueryError, apply_query

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The store rejected an operation."""


class NotFoundError(StoreError):
    """No document with the requested id exists."""


class ConflictError(StoreError):
    """A uniqueness constraint was violated."""


def _encode(doc: Mapping[str, Any]) -> str:
    try:
        return json.dumps(doc, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        msg = f"Document is not JSON-serializable: {exc}"
        raise StoreError(msg) from exc


class DocumentStore:
    """One collection of JSON documents keyed by a string ``id``.

    Parameters:
        name: Collection name (used in error messages and logs).
        db_path: SQLite file backing the collection.
    """

    def __init__(self, name: str, db_path: Path) -> None:
        self.name = name
        self.db_path = db_path
        self._engine: Engine = init_collection(db_path)
        self._required_fields: set[str] = set()

    @property
    def engine(self) -> Engine:
        return self._engine

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def insert(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        """Insert *doc*; an ``id`` is generated when absent."""
        return await asyncio.to_thread(self._insert, dict(doc))

    async def find(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return documents matching *query* (see :mod:`kblog.infrastructure.query`)."""
        return await asyncio.to_thread(self._find, query)

    async def find_by_id(self, doc_id: str) -> dict[str, Any]:
        return await asyncio.to_thread(self._find_by_id, doc_id)

    async def update(self, doc_id: str, doc: Mapping[str, Any]) -> dict[str, Any]:
        """Replace the document, keeping its ``id`` and original ``created``."""
        return await asyncio.to_thread(self._update, doc_id, dict(doc))

    async def patch(self, doc_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Merge *fields* into the stored document."""
        return await asyncio.to_thread(self._patch, doc_id, dict(fields))

    async def remove(self, doc_id: str) -> dict[str, Any]:
        """Delete the document and return it."""
        return await asyncio.to_thread(self._remove, doc_id)

    def ensure_index(self, field: str, *, unique: bool = False, sparse: bool = True) -> None:
        """Declare an index on *field*.

        ``unique=True`` rejects a second document with the same value.
        ``sparse=False`` additionally rejects documents lacking the field.
        """
        with self._engine.begin() as conn:
            conn.execute(text(field_index_sql(field, unique=unique)))
        if not sparse:
            self._required_fields.add(field)
        logger.debug("Ensured index on %s.%s (unique=%s)", self.name, field, unique)

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Blocking implementations (run in worker threads)
    # ------------------------------------------------------------------

    def _check_required(self, doc: Mapping[str, Any]) -> None:
        missing = sorted(f for f in self._required_fields if doc.get(f) is None)
        if missing:
            msg = f"Missing indexed field(s) in {self.name}: {', '.join(missing)}"
            raise ConflictError(msg)

    def _load(self, conn: Connection, doc_id: str) -> dict[str, Any]:
        row = conn.execute(select(documents.c.body).where(documents.c.id == doc_id)).first()
        if row is None:
            msg = f"No record found for id '{doc_id}'"
            raise NotFoundError(msg)
        loaded: dict[str, Any] = json.loads(row.body)
        return loaded

    def _insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        doc_id = doc.get("id")
        if doc_id is None:
            doc_id = uuid.uuid4().hex[:16]
        doc["id"] = str(doc_id)
        self._check_required(doc)
        body = _encode(doc)
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(documents).values(id=doc["id"], body=body))
        except IntegrityError as exc:
            msg = f"Unique constraint violated in {self.name} for id '{doc['id']}'"
            raise ConflictError(msg) from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return doc

    def _find(self, query: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(
                    select(documents.c.body).order_by(literal_column("rowid"))
                ).fetchall()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        loaded = [json.loads(row.body) for row in rows]
        try:
            return apply_query(loaded, query)
        except QueryError as exc:
            raise StoreError(str(exc)) from exc

    def _find_by_id(self, doc_id: str) -> dict[str, Any]:
        with self._engine.connect() as conn:
            return self._load(conn, doc_id)

    def _write(
        self,
        doc_id: str,
        build: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> dict[str, Any]:
        """Load, transform via *build(existing)*, and store in one transaction."""
        try:
            with self._engine.begin() as conn:
                existing = self._load(conn, doc_id)
                doc = build(existing)
                doc["id"] = doc_id
                self._check_required(doc)
                conn.execute(
                    update(documents).where(documents.c.id == doc_id).values(body=_encode(doc))
                )
        except IntegrityError as exc:
            msg = f"Unique constraint violated in {self.name} for id '{doc_id}'"
            raise ConflictError(msg) from exc
        return doc

    def _update(self, doc_id: str, doc: dict[str, Any]) -> dict[str, Any]:
        def build(existing: dict[str, Any]) -> dict[str, Any]:
            if "created" in existing and "created" not in doc:
                doc["created"] = existing["created"]
            return doc

        return self._write(doc_id, build)

    def _patch(self, doc_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        fields.pop("id", None)
        return self._write(doc_id, lambda existing: {**existing, **fields})

    def _remove(self, doc_id: str) -> dict[str, Any]:
        with self._engine.begin() as conn:
            existing = self._load(conn, doc_id)
            conn.execute(delete(documents).where(documents.c.id == doc_id))
        return existing
