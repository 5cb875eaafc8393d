"""Rate limit policies and the registry of named limiters.

Policies are literal code configuration, built at process start. Each named
surface gets its own limiter with its own store and reclaimer, so a client
throttled on the contact form is unaffected on the general API. A new
protected surface means a new named policy, never a shared store.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from throttle.core.errors import ValidationAppError
from throttle.core.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Too many requests, please try again later."

CONTACT_FORM = "contact-form"
GENERAL_API = "general-api"


class Policy(BaseModel):
    """Immutable limiter configuration.

    Accepts both field names and the wire-style aliases
    (``windowMs``, ``max``, ``message``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    window_ms: int = Field(..., alias="windowMs", gt=0, description="Window length in milliseconds")
    max_requests: int = Field(..., alias="max", ge=1, description="Requests allowed per window")
    message: str = Field(DEFAULT_MESSAGE, min_length=1, description="Body message when throttled")

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000


CONTACT_FORM_POLICY = Policy(
    windowMs=15 * 60 * 1000,
    max=5,
    message="Too many contact form submissions. Please try again later.",
)

GENERAL_API_POLICY = Policy(
    windowMs=60 * 1000,
    max=60,
    message="Too many API requests. Please slow down.",
)


def create_rate_limiter(options: Mapping[str, Any] | Policy, *, name: str = "custom", **kwargs: Any) -> RateLimiter:
    """Build a standalone limiter from a policy or an options mapping.

    Example:
        >>> limiter = create_rate_limiter({"windowMs": 60_000, "max": 2})
        >>> limiter.policy.max_requests
        2
    """
    policy = options if isinstance(options, Policy) else Policy.model_validate(options)
    return RateLimiter(policy, name=name, **kwargs)


class PolicyRegistry:
    """Named limiters for distinct protected surfaces."""

    def __init__(self, **limiter_kwargs: Any) -> None:
        self._limiter_kwargs = limiter_kwargs
        self._limiters: dict[str, RateLimiter] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: object) -> bool:
        return name in self._limiters

    def __iter__(self) -> Iterator[RateLimiter]:
        return iter(list(self._limiters.values()))

    def __len__(self) -> int:
        return len(self._limiters)

    def names(self) -> list[str]:
        return list(self._limiters)

    def register(self, name: str, policy: Policy, **overrides: Any) -> RateLimiter:
        """Create and register a limiter for a new surface.

        Raises:
            ValidationAppError: If the name is already taken.
        """
        with self._lock:
            if name in self._limiters:
                raise ValidationAppError(
                    code="duplicate_policy",
                    message=f"Rate limit policy '{name}' is already registered",
                    details={"policy": name},
                )
            limiter = RateLimiter(policy, name=name, **{**self._limiter_kwargs, **overrides})
            self._limiters[name] = limiter

        logger.info(
            "rate_limit.policy_registered",
            extra={
                "limiter": name,
                "limit": policy.max_requests,
                "window_ms": policy.window_ms,
            },
        )
        return limiter

    def get(self, name: str) -> RateLimiter:
        """Return the limiter for name; raises KeyError when unknown."""
        return self._limiters[name]

    def start_all(self) -> None:
        for limiter in self:
            limiter.start()

    def stop_all(self) -> None:
        for limiter in self:
            limiter.stop()


def build_default_registry(**limiter_kwargs: Any) -> PolicyRegistry:
    """Registry with the contact-form and general-api presets."""
    registry = PolicyRegistry(**limiter_kwargs)
    registry.register(CONTACT_FORM, CONTACT_FORM_POLICY)
    registry.register(GENERAL_API, GENERAL_API_POLICY)
    return registry
