"""Tests for the background reclaimer."""

from __future__ import annotations

import logging
import threading
from unittest.mock import MagicMock

import pytest

from throttle.adapters.rate_limit.in_memory import InMemoryWindowStore
from throttle.core.reclaimer import Reclaimer


def test_run_once_sweeps_expired_windows(clock) -> None:
    store = InMemoryWindowStore()
    store.hit("a", now=clock(), window_seconds=10)
    store.hit("b", now=clock(), window_seconds=100)
    reclaimer = Reclaimer(store, interval_seconds=60, clock=clock)

    clock.advance(10)

    assert reclaimer.run_once() == 1
    assert set(store.snapshot()) == {"b"}


def test_background_thread_sweeps_until_stopped() -> None:
    store = MagicMock(spec=InMemoryWindowStore)
    store.__len__.return_value = 0
    swept = threading.Event()

    def _sweep(now: float) -> int:
        swept.set()
        return 0

    store.sweep_expired.side_effect = _sweep
    reclaimer = Reclaimer(store, interval_seconds=0.01)

    reclaimer.start()
    assert swept.wait(timeout=2.0)
    reclaimer.stop()

    assert reclaimer.is_running is False
    calls_at_stop = store.sweep_expired.call_count
    threading.Event().wait(0.05)
    assert store.sweep_expired.call_count == calls_at_stop


def test_start_is_idempotent_and_restartable() -> None:
    reclaimer = Reclaimer(InMemoryWindowStore(), interval_seconds=3600)

    reclaimer.start()
    first_thread = reclaimer._thread
    reclaimer.start()
    assert reclaimer._thread is first_thread

    reclaimer.stop()
    assert reclaimer.is_running is False

    reclaimer.start()
    assert reclaimer.is_running is True
    reclaimer.stop()


def test_stop_without_start_is_safe() -> None:
    reclaimer = Reclaimer(InMemoryWindowStore())
    reclaimer.stop()
    assert reclaimer.is_running is False


def test_warns_when_store_grows_past_threshold(clock, caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryWindowStore()
    for i in range(5):
        store.hit(f"k{i}", now=clock(), window_seconds=60)
    reclaimer = Reclaimer(store, clock=clock, warn_size=3, name="contact-form")

    with caplog.at_level(logging.WARNING, logger="throttle.core.reclaimer"):
        removed = reclaimer.run_once()

    assert removed == 0
    # Live entries are never evicted to satisfy the threshold
    assert len(store) == 5
    assert any(r.getMessage() == "rate_limit.store_large" for r in caplog.records)


def test_invalid_interval_rejected() -> None:
    with pytest.raises(ValueError):
        Reclaimer(InMemoryWindowStore(), interval_seconds=0)
