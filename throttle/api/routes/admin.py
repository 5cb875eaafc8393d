"""Administrative endpoints for inspecting and resetting rate limits.

Meant for operations tooling: clear one client's throttling state without
restarting the process.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from throttle.core.auth import verify_admin_key
from throttle.core.client_identity import build_client_key
from throttle.core.policies import PolicyRegistry
from throttle.core.rate_limit import RateLimiter
from throttle.schemas.admin import PolicyStatus, ResetRequest, ResetResponse

router = APIRouter(
    prefix="/admin/rate-limits",
    tags=["Admin"],
    dependencies=[Depends(verify_admin_key)],
)


def get_registry(request: Request) -> PolicyRegistry:
    return request.app.state.rate_limits


def _get_limiter(registry: PolicyRegistry, name: str) -> RateLimiter:
    try:
        return registry.get(name)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown rate limit policy '{name}'",
        ) from None


def _describe(limiter: RateLimiter) -> PolicyStatus:
    return PolicyStatus(
        name=limiter.name,
        limit=limiter.policy.max_requests,
        window_ms=limiter.policy.window_ms,
        message=limiter.policy.message,
        tracked_windows=len(limiter.store),
        reclaimer_running=limiter.reclaimer.is_running,
    )


@router.get("", response_model=list[PolicyStatus])
def list_policies(registry: PolicyRegistry = Depends(get_registry)) -> list[PolicyStatus]:
    return [_describe(limiter) for limiter in registry]


@router.get("/{policy}", response_model=PolicyStatus)
def get_policy(policy: str, registry: PolicyRegistry = Depends(get_registry)) -> PolicyStatus:
    return _describe(_get_limiter(registry, policy))


@router.post("/{policy}/reset", response_model=ResetResponse)
def reset_client(
    policy: str,
    payload: ResetRequest,
    registry: PolicyRegistry = Depends(get_registry),
) -> ResetResponse:
    """Clear one client's window on one policy. Other clients are untouched."""
    limiter = _get_limiter(registry, policy)
    key = build_client_key(payload.address, payload.user_agent)
    limiter.reset(key)
    return ResetResponse(policy=policy, client_fingerprint=key.fingerprint())
