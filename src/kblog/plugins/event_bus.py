"""Lifecycle event delivery to plugins, recorded in the ``event_wal`` table.

``publish`` stores the event as ``pending`` first and only then calls the
pluggy hook, either on the calling thread (``sync``) or on a small worker
pool. Every delivery settles the row: ``completed``, or ``failed`` with the
error and a retry count that turns into ``dead_letter`` at ``max_retries``.
``drain`` re-delivers whatever is still pending or failed; the application
calls it on close.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from kblog.infrastructure.database.schema import event_wal
from kblog.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from kblog.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class EventStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


REDELIVERABLE = (EventStatus.PENDING, EventStatus.FAILED)


class EventBus:
    """Publishes ``post_<method>`` events for mutated documents.

    Parameters:
        engine: Engine whose database holds ``event_wal``.
        plugin_manager: Source of the hook callers.
        sync: Deliver on the publishing thread instead of the worker pool.
        max_retries: Failed deliveries before an event is dead-lettered.
        max_workers: Worker pool size when not ``sync``.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._max_retries = max_retries
        self._pool = None if sync else ThreadPoolExecutor(max_workers=max_workers)
        self._in_flight: list[Future[None]] = []

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def sync(self) -> bool:
        return self._pool is None

    def publish(self, hook_name: str, service_name: str, document: dict[str, Any]) -> int:
        """Record and deliver one event. Returns its ``event_wal`` id."""
        payload = {"service_name": service_name, "document": document}
        event_id = self._record(hook_name, payload)
        if self._pool is None:
            self._deliver(event_id, hook_name, payload)
        else:
            self._in_flight.append(self._pool.submit(self._deliver, event_id, hook_name, payload))
        return event_id

    def drain(self) -> list[dict[str, Any]]:
        """Wait for in-flight deliveries, then re-deliver unsettled events.

        Returns ``{id, hook_name, status}`` for every re-delivered event.
        """
        self._join()
        with self._engine.connect() as conn:
            backlog = conn.execute(
                select(event_wal.c.id, event_wal.c.hook_name, event_wal.c.payload)
                .where(event_wal.c.status.in_([s.value for s in REDELIVERABLE]))
                .order_by(event_wal.c.id)
            ).all()

        summary: list[dict[str, Any]] = []
        for event_id, hook_name, raw in backlog:
            self._deliver(event_id, hook_name, json.loads(raw))
            status = self.status(event_id)
            summary.append({"id": event_id, "hook_name": hook_name, "status": status})
        return summary

    def status(self, event_id: int) -> EventStatus | None:
        with self._engine.connect() as conn:
            value = conn.execute(
                select(event_wal.c.status).where(event_wal.c.id == event_id)
            ).scalar_one_or_none()
        return EventStatus(value) if value is not None else None

    def close(self) -> None:
        """Finish in-flight deliveries and stop the worker pool."""
        self._join()
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def _record(self, hook_name: str, payload: dict[str, Any]) -> int:
        with self._engine.begin() as conn:
            inserted = conn.execute(
                insert(event_wal).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload, default=str),
                    status=EventStatus.PENDING.value,
                    retries=0,
                    created=now_iso(),
                )
            )
        (event_id,) = inserted.inserted_primary_key
        return int(event_id)

    def _deliver(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> None:
        caller = getattr(self._pm.hook, hook_name, None)
        error: str | None = None
        if caller is not None:
            try:
                caller(**payload)
            except Exception as exc:
                logger.warning("Plugin hook %s failed for event %d: %s", hook_name, event_id, exc)
                error = str(exc) or type(exc).__name__
        self._settle(event_id, error)

    def _settle(self, event_id: int, error: str | None) -> None:
        """Mark *event_id* completed, or count a failed attempt."""
        row = event_wal.c.id == event_id
        with self._engine.begin() as conn:
            if error is None:
                values: dict[str, Any] = {
                    "status": EventStatus.COMPLETED.value,
                    "completed": now_iso(),
                }
            else:
                retries = conn.execute(select(event_wal.c.retries).where(row)).scalar_one() + 1
                exhausted = retries >= self._max_retries
                values = {
                    "status": (EventStatus.DEAD_LETTER if exhausted else EventStatus.FAILED).value,
                    "error": error,
                    "retries": retries,
                    "completed": now_iso() if exhausted else None,
                }
            conn.execute(update(event_wal).where(row).values(**values))

    def _join(self) -> None:
        pending, self._in_flight = self._in_flight, []
        for future in pending:
            try:
                future.result(timeout=30)
            except Exception:
                logger.debug("Event delivery raised outside the hook", exc_info=True)
