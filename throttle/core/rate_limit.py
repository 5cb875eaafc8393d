"""Fixed-window rate limiting for FastAPI routes.

``RateLimiter`` turns a request into an allow/block decision against one
policy. Every call counts against the client's window, including calls that
end up blocked, so hammering after a block keeps the count climbing.

HTTP wiring:
- ``rate_limited(name)`` returns a route dependency that looks the named
  limiter up on ``app.state.rate_limits`` (set by the app factory).
- On allow, ``X-RateLimit-Limit``/``-Remaining``/``-Reset`` are set on the
  response and recorded on ``request.state.rate_limit_headers``; the request
  middleware copies them onto error responses from downstream handlers. On
  block, ``RateLimitExceededError`` is raised and rendered as a 429 by the
  exception handlers, carrying the same headers.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from fastapi import Request, Response

from throttle.adapters.rate_limit.base import AbstractWindowStore
from throttle.adapters.rate_limit.in_memory import InMemoryWindowStore
from throttle.core.client_identity import ClientKey, identify_client
from throttle.core.config import settings
from throttle.core.errors import RateLimitExceededError
from throttle.core.reclaimer import Reclaimer

if TYPE_CHECKING:
    from throttle.core.policies import Policy

logger = logging.getLogger(__name__)

HEADER_LIMIT = "X-RateLimit-Limit"
HEADER_REMAINING = "X-RateLimit-Remaining"
HEADER_RESET = "X-RateLimit-Reset"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one check, with the metadata both outcomes carry.

    Attributes:
        limit: Configured maximum per window.
        remaining: Requests left in the window (0 when blocked).
        reset_at: UNIX epoch seconds when the window resets.
    """

    limit: int
    remaining: int
    reset_at: float

    @property
    def allowed(self) -> bool:
        return isinstance(self, Allowed)

    @property
    def reset_at_iso(self) -> str:
        return format_reset(self.reset_at)


@dataclass(frozen=True)
class Allowed(RateLimitDecision):
    pass


@dataclass(frozen=True)
class Blocked(RateLimitDecision):
    retry_after_seconds: int = 0
    message: str = ""


def format_reset(reset_at: float) -> str:
    """ISO-8601 UTC instant with millisecond precision, e.g. ``2024-01-01T00:01:00.000Z``."""
    moment = datetime.fromtimestamp(reset_at, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Standard rate limit headers for a decision; Retry-After only when blocked."""
    headers = {
        HEADER_LIMIT: str(decision.limit),
        HEADER_REMAINING: str(decision.remaining),
        HEADER_RESET: decision.reset_at_iso,
    }
    if isinstance(decision, Blocked):
        headers["Retry-After"] = str(decision.retry_after_seconds)
    return headers


class RateLimiter:
    """Allow/block decisions for one policy.

    The limiter owns its store and the reclaimer sweeping it. Stores are
    never shared between limiters.
    """

    def __init__(
        self,
        policy: Policy,
        *,
        name: str = "default",
        store: AbstractWindowStore | None = None,
        clock: Callable[[], float] = time.time,
        reclaim_interval_seconds: float = 60.0,
        store_size_warning: int | None = None,
        trust_forwarded_for: bool = True,
    ) -> None:
        self.name = name
        self.policy = policy
        self._clock = clock
        self._store = store if store is not None else InMemoryWindowStore()
        self._trust_forwarded_for = trust_forwarded_for
        self._reclaimer = Reclaimer(
            self._store,
            interval_seconds=reclaim_interval_seconds,
            clock=clock,
            warn_size=store_size_warning,
            name=name,
        )

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"RateLimiter(name={self.name!r}, max={self.policy.max_requests}, "
            f"window_ms={self.policy.window_ms}, tracked={len(self._store)})"
        )

    @property
    def store(self) -> AbstractWindowStore:
        return self._store

    @property
    def reclaimer(self) -> Reclaimer:
        return self._reclaimer

    def start(self) -> None:
        self._reclaimer.start()

    def stop(self) -> None:
        """Stop background sweeps. In-flight checks are unaffected."""
        self._reclaimer.stop()

    def identify(self, request: Request) -> ClientKey:
        return identify_client(request, trust_forwarded_for=self._trust_forwarded_for)

    def check(self, request: Request) -> RateLimitDecision:
        """Count the request against its client's window and decide."""
        return self.check_key(self.identify(request))

    def check_key(self, key: ClientKey) -> RateLimitDecision:
        """Count one request for an already-derived key and decide."""
        now = self._clock()
        window, count = self._store.hit(key, now, self.policy.window_seconds)
        limit = self.policy.max_requests

        if count > limit:
            # round() drops float noise so a full window reads as N, not N+1
            retry_after = max(1, math.ceil(round(window.reset_at - now, 3)))
            return Blocked(
                limit=limit,
                remaining=0,
                reset_at=window.reset_at,
                retry_after_seconds=retry_after,
                message=self.policy.message,
            )

        return Allowed(limit=limit, remaining=max(0, limit - count), reset_at=window.reset_at)

    def reset(self, key: ClientKey) -> None:
        """Forget one client's window; its next request starts a new one."""
        self._store.remove(key)
        logger.info(
            "rate_limit.reset",
            extra={"limiter": self.name, "client_fingerprint": key.fingerprint()},
        )

    def enforce(self, request: Request, response: Response) -> RateLimitDecision:
        """Apply the limiter to a request in the HTTP pipeline.

        Raises:
            RateLimitExceededError: When the client is over the limit.
        """
        key = self.identify(request)
        decision = self.check_key(key)
        headers = rate_limit_headers(decision)
        # Picked up by the request middleware so error responses keep them too
        request.state.rate_limit_headers = headers

        if isinstance(decision, Blocked):
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "limiter": self.name,
                    "client_fingerprint": key.fingerprint(),
                    "limit": decision.limit,
                    "retry_after_s": decision.retry_after_seconds,
                    "path": request.url.path,
                },
            )
            raise RateLimitExceededError(
                code="rate_limited",
                message=decision.message,
                retry_after_seconds=decision.retry_after_seconds,
                headers=headers,
            )

        logger.debug(
            "rate_limit.allowed",
            extra={
                "limiter": self.name,
                "client_fingerprint": key.fingerprint(),
                "limit": decision.limit,
                "remaining": decision.remaining,
            },
        )
        response.headers.update(headers)
        return decision


def rate_limited(name: str) -> Callable[[Request, Response], None]:
    """Route dependency enforcing the named limiter from ``app.state.rate_limits``.

    Usage:
        router = APIRouter(dependencies=[Depends(rate_limited("contact-form"))])
    """

    def enforce_rate_limit(request: Request, response: Response) -> None:
        if not settings.app.rate_limit_enabled:
            return
        limiter = request.app.state.rate_limits.get(name)
        limiter.enforce(request, response)

    enforce_rate_limit.__name__ = f"enforce_rate_limit_{name.replace('-', '_')}"
    return enforce_rate_limit
