"""Debounced persistence of the link store."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from .base import LinkBackendBase
from .models import LinkRecord
from ..errors import PersistenceError


SnapshotFn = Callable[[], Awaitable[List[LinkRecord]]]


class PersistenceWriter:
    """Coalesce bursts of store mutations into a single backend write.

    ``schedule_flush`` (re)arms one timer on the running event loop. When it
    fires, a snapshot of the store is written by the backend in a worker
    thread. Flushes hold ``_write_lock``, so two writes never overlap.

    Failed writes are logged and dropped. The in-memory store stays
    authoritative until the process restarts.
    """

    def __init__(
        self,
        backend: LinkBackendBase,
        snapshot: SnapshotFn,
        delay_seconds: float = 0.3,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize writer.

        Args:
            backend: Backend that stores the snapshot
            snapshot: Coroutine function returning a consistent copy of the store
            delay_seconds: Quiet period after the last mutation before writing
            logger: Optional logger instance
        """
        self.backend = backend
        self.snapshot = snapshot
        self.delay_seconds = delay_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.flush_count = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._write_lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a debounced flush is waiting to fire."""
        return self._timer is not None

    def schedule_flush(self) -> None:
        """Request a flush after the debounce delay, restarting any pending timer.

        Must be called from the event loop thread.
        """
        loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.delay_seconds, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self.flush())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def flush(self) -> bool:
        """Write the current snapshot now.

        Returns:
            True if the backend accepted the write
        """
        async with self._write_lock:
            records = await self.snapshot()
            try:
                await asyncio.to_thread(self.backend.save, records)
            except PersistenceError as e:
                self.logger.error(f"Failed to persist links: {e}")
                return False

            self.flush_count += 1
            self.logger.debug(f"Persisted {len(records)} links")
            return True

    async def close(self) -> None:
        """Flush anything still waiting on the debounce timer and drain writes."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            await self.flush()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
