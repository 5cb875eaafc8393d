"""Application-level exception types.

Domain errors raised by the limiter and the admin surface. The exception
handlers translate them into consistent JSON responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    policy: str
    http_status: int
    retry_after: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input or policy configuration is invalid."""


class AuthenticationAppError(AppError):
    """Raised when the admin key is missing or wrong."""


@dataclass
class RateLimitExceededError(AppError):
    """Raised by the limiter dependency when a client is throttled.

    This is the normal outcome of policy enforcement, not a failure. The
    handler renders it as HTTP 429 with ``{"error", "retryAfter"}``.
    """

    retry_after_seconds: int = 0
    headers: dict[str, str] = field(default_factory=dict)
