"""Background sweep of expired windows.

Housekeeping only: the read path replaces expired windows on its own, so a
stopped or slow reclaimer never changes an allow/block decision. It only
bounds memory.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from throttle.adapters.rate_limit.base import AbstractWindowStore

logger = logging.getLogger(__name__)


class Reclaimer:
    """Periodically evicts expired windows from a store.

    Runs on a daemon thread owned by this instance. ``stop()`` joins the
    thread, so once it returns no further sweep will run.
    """

    def __init__(
        self,
        store: AbstractWindowStore,
        *,
        interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
        warn_size: int | None = None,
        name: str = "rate-limit",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self._store = store
        self._interval = interval_seconds
        self._clock = clock
        self._warn_size = warn_size
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._state_lock = threading.Lock()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start the sweep thread; no-op if already running."""
        with self._state_lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name=f"reclaimer-{self._name}",
                daemon=True,
            )
            self._thread.start()

        logger.debug(
            "rate_limit.reclaimer_started",
            extra={"limiter": self._name, "interval_s": self._interval},
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the sweep thread and wait for it to exit."""
        with self._state_lock:
            thread = self._thread
            self._stop_event.set()
            if thread is not None:
                thread.join(timeout)
                if thread.is_alive():
                    logger.warning(
                        "rate_limit.reclaimer_stop_timeout",
                        extra={"limiter": self._name, "timeout_s": timeout},
                    )
                    return
            self._thread = None

        logger.debug("rate_limit.reclaimer_stopped", extra={"limiter": self._name})

    def run_once(self) -> int:
        """Sweep now, on the calling thread.

        Returns:
            Number of windows removed.
        """
        removed = self._store.sweep_expired(self._clock())
        remaining = len(self._store)

        logger.debug(
            "rate_limit.sweep",
            extra={"limiter": self._name, "removed": removed, "remaining": remaining},
        )
        if self._warn_size is not None and remaining > self._warn_size:
            logger.warning(
                "rate_limit.store_large",
                extra={"limiter": self._name, "remaining": remaining, "warn_size": self._warn_size},
            )
        return removed

    def _run(self) -> None:
        # wait() returns True once stop() sets the event
        while not self._stop_event.wait(self._interval):
            try:
                self.run_once()
            except Exception:
                logger.exception("rate_limit.sweep_failed", extra={"limiter": self._name})
