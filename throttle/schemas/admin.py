"""Pydantic schemas for the rate limit admin endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ResetRequest(BaseModel):
    """Names the client whose throttling state should be cleared.

    The key is derived exactly as on the request path, so pass the address
    and User-Agent as the limiter saw them.
    """

    address: str | None = Field(
        None, description="Client address (first X-Forwarded-For entry or peer address)."
    )
    user_agent: str | None = Field(
        None, description="User-Agent header value; truncated the same way as on the request path."
    )


class ResetResponse(BaseModel):
    policy: str
    client_fingerprint: str
    reset: bool = True


class PolicyStatus(BaseModel):
    """Configuration and current load of one named limiter."""

    name: str
    limit: int = Field(..., description="Maximum requests per window.")
    window_ms: int = Field(..., description="Window length in milliseconds.")
    message: str
    tracked_windows: int = Field(..., description="Windows currently held in memory.")
    reclaimer_running: bool
