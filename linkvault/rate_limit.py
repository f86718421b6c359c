"""Fixed-window, per-client rate limiter."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class RateWindow:
    """Request count for one client inside the current window."""

    window_start: float
    count: int = 0


class RateLimiter:
    """Allow ``limit`` requests per client per ``window_seconds``.

    A window opens on a client's first request and is replaced once it is
    older than ``window_seconds``. Calls over the limit keep counting until
    the window rolls over.

    Windows that have already rolled over are purged at most once every
    ``sweep_seconds``. A purged window would have been reset on the client's
    next call anyway, so purging never changes an answer.
    """

    def __init__(
        self,
        limit: int = 10,
        window_seconds: float = 60,
        sweep_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.sweep_seconds = sweep_seconds
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def check(self, client_id: str) -> bool:
        """Record a request for ``client_id``.

        Args:
            client_id: Client identifier (usually the remote address)

        Returns:
            True if the request is allowed, False if rate limited
        """
        with self._lock:
            now = self.clock()
            if now - self._last_sweep >= self.sweep_seconds:
                self._sweep(now)

            window = self._windows.get(client_id)
            if window is None or now - window.window_start > self.window_seconds:
                self._windows[client_id] = RateWindow(window_start=now, count=1)
                return True

            window.count += 1
            count = window.count

        if count > self.limit:
            self.logger.warning(f"Rate limit exceeded for {client_id} ({count} requests)")
            return False
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> None:
        """Drop rolled-over windows. Caller must hold self._lock."""
        stale = [
            client_id
            for client_id, window in self._windows.items()
            if now - window.window_start > self.window_seconds
        ]
        for client_id in stale:
            del self._windows[client_id]
        self._last_sweep = now
        if stale:
            self.logger.debug(f"Evicted {len(stale)} stale rate-limit windows")
