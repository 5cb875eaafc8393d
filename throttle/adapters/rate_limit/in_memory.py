"""In-memory fixed-window store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock guards the whole map. Simple and enough for the
  expected traffic; a sharded lock is the next step if contention shows up.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable

from throttle.adapters.rate_limit.base import AbstractWindowStore, Window


class InMemoryWindowStore(AbstractWindowStore):
    """Fixed windows keyed by client, held in a dict.

    Windows are never extended. An expired entry is replaced by a fresh one
    on the next request, so a burst straddling the boundary can see up to
    twice the limit in a short real-time span. That is the fixed-window
    trade-off, kept on purpose.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._windows: dict[Hashable, Window] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._windows

    def get_or_create(self, key: Hashable, now: float, window_seconds: float) -> Window:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        with self._lock:
            window = self._windows.get(key)
            if window is None or window.is_expired(now):
                window = Window(count=0, reset_at=now + window_seconds)
                self._windows[key] = window
            return window

    def increment(self, key: Hashable) -> int:
        with self._lock:
            window = self._windows[key]
            assert window.count >= 0, "window count went negative"
            window.count += 1
            return window.count

    def hit(self, key: Hashable, now: float, window_seconds: float) -> tuple[Window, int]:
        # RLock: both calls below re-enter the lock held here.
        with self._lock:
            window = self.get_or_create(key, now, window_seconds)
            count = self.increment(key)
            return window, count

    def remove(self, key: Hashable) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def sweep_expired(self, now: float) -> int:
        with self._lock:
            expired = [k for k, w in self._windows.items() if w.is_expired(now)]
            for key in expired:
                del self._windows[key]
            return len(expired)

    def snapshot(self) -> dict[Hashable, Window]:
        """Copy of the current windows, for inspection and tests."""
        with self._lock:
            return {k: Window(w.count, w.reset_at) for k, w in self._windows.items()}
