"""CreationQueue: at most one create in flight per service, FIFO hand-off.

A task entering :meth:`CreationQueue.slot` while another holds it parks
on a future appended to the queue. Leaving the slot hands it directly to
the oldest live waiter, so the slot never looks free while requests are
pending and late arrivals cannot overtake queued ones.

Cooperative scheduling makes the bookkeeping safe without a lock: the
flag and deque are only touched between suspension points.
"""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class CreationQueue:
    def __init__(self) -> None:
        self._busy = False
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def busy(self) -> bool:
        """Whether a create currently holds the slot."""
        return self._busy

    def __len__(self) -> int:
        """Number of queued (not yet running) creates."""
        return sum(1 for w in self._waiters if not w.done())

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold the single creation slot for the duration of the block."""
        await self._acquire()
        try:
            yield
        finally:
            self._release()

    async def _acquire(self) -> None:
        if not self._busy:
            self._busy = True
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            # Handed the slot just before cancellation: pass it on.
            if waiter.done() and not waiter.cancelled():
                self._release()
            raise

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._busy = False
