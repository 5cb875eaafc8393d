"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that loads settings.
"""

from __future__ import annotations

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from throttle.core.app_factory import create_app
from throttle.core.policies import build_default_registry


class FakeClock:
    """Deterministic clock returning UNIX seconds."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def make_request(
    *,
    peer: str | None = "127.0.0.1",
    user_agent: str | None = "test-agent",
    forwarded_for: str | None = None,
    path: str = "/test",
) -> Request:
    """Build a bare Starlette request for unit tests."""
    headers: list[tuple[bytes, bytes]] = []
    if user_agent is not None:
        headers.append((b"user-agent", user_agent.encode("latin-1")))
    if forwarded_for is not None:
        headers.append((b"x-forwarded-for", forwarded_for.encode("latin-1")))

    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": headers,
        "client": (peer, 50000) if peer is not None else None,
    }
    return Request(scope)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock):
    """Default presets on a fake clock, with a long sweep interval."""
    return build_default_registry(clock=clock, reclaim_interval_seconds=3600)


@pytest.fixture
def client(registry):
    """Test client over an isolated app; the lifespan runs for each test."""
    with TestClient(create_app(registry)) as test_client:
        yield test_client


@pytest.fixture
def request_factory():
    return make_request
