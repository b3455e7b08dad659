"""Sequential id allocation through the options service.

Incremental collections take their ids from a counter document stored in
the options collection: ``{"id": "<service>:last_id", "value": N,
"internal": True}``. The counter is read and written only through the
options service's public operations (envelope, cache, creation queue).

Allocation is a read-modify-write without an atomic primitive. It is safe
because the owning service runs at most one create at a time
(:class:`~kblog.services.queue.CreationQueue`), and each service owns a
distinct counter document. Ids are strictly increasing but may skip a
value when the insert following an allocation fails.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kblog.services.errors import AllocationError

if TYPE_CHECKING:
    from kblog.services.base import Service

logger = logging.getLogger(__name__)

LAST_ID = "last_id"
OPTIONS_SERVICE_NAME = "options"


def counter_id(service_name: str) -> str:
    """Options document id holding *service_name*'s last assigned id."""
    return f"{service_name}:{LAST_ID}"


class SequentialIdAllocator:
    """Hands out ``"0"``, ``"1"``, ``"2"`` ... for one service."""

    def __init__(self, service_name: str, options: Service | None = None) -> None:
        self._service_name = service_name
        self._options = options

    @property
    def counter_id(self) -> str:
        return counter_id(self._service_name)

    def bind(self, options: Service) -> None:
        """Attach the options service (done at application setup)."""
        self._options = options

    async def allocate(self) -> str:
        """Claim the next id.

        Raises:
            AllocationError: If the options service is not bound or the
                counter could not be persisted.
        """
        if self._options is None:
            msg = f"No options service bound for {self._service_name} id allocation"
            raise AllocationError(msg)

        current = await self._options.get(self.counter_id)
        new_id = 0
        if current.ok:
            new_id = int(current.payload["value"]) + 1

        if new_id > 0:
            saved = await self._options.update(
                self.counter_id,
                {"value": new_id, "internal": True},
            )
        else:
            saved = await self._options.create(
                {"id": self.counter_id, "value": new_id, "internal": True},
            )

        if not saved.ok:
            msg = f"Could not persist {self.counter_id}: {saved.error_message}"
            raise AllocationError(msg)

        logger.debug("Allocated id %s for %s", new_id, self._service_name)
        return str(new_id)
