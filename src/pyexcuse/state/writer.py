"""Fire-and-forget persistence of state mutations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable

from pyexcuse.exceptions import ExcuseNotReadyError
from pyexcuse.storage import PersistenceGateway

_logger = logging.getLogger(__name__)


class PersistenceWriter:
    """Dispatch storage writes as independent tasks.

    Callers mutate in-memory state first and then hand the new value to
    :meth:`set` or :meth:`remove`, which return immediately.  A failed
    write is logged and dropped: it is neither retried nor reported to
    the caller.  :meth:`flush` waits for every write still in flight.
    """

    def __init__(self, storage: PersistenceGateway, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._storage = storage
        self._loop = loop
        self._pending: set[asyncio.Task[None]] = set()

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Pin the loop writes are scheduled on."""
        self._loop = loop

    @property
    def pending(self) -> int:
        return len(self._pending)

    def set(self, key: str, value: str) -> asyncio.Task[None]:
        key = str(key)
        return self._schedule(key, "set", self._storage.set(key, value))

    def remove(self, key: str) -> asyncio.Task[None]:
        key = str(key)
        return self._schedule(key, "remove", self._storage.remove(key))

    def _schedule(self, key: str, action: str, operation: Awaitable[None]) -> asyncio.Task[None]:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # Avoid "coroutine was never awaited" on the discarded operation.
                close = getattr(operation, "close", None)
                if close is not None:
                    close()
                raise ExcuseNotReadyError("No event loop available to persist state") from None

        task = loop.create_task(self._run(key, action, operation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, key: str, action: str, operation: Awaitable[None]) -> None:
        try:
            await operation
        except Exception:
            _logger.warning("Storage %s failed for key=%s", action, key, exc_info=True)
            return
        _logger.debug("Storage %s completed for key=%s", action, key)

    async def flush(self) -> None:
        """Wait until every scheduled write has finished (or failed)."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
