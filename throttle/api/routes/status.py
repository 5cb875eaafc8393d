"""General API endpoints, guarded by the general-api policy."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from throttle.core.config import settings
from throttle.core.policies import GENERAL_API
from throttle.core.rate_limit import rate_limited

router = APIRouter(tags=["API"], dependencies=[Depends(rate_limited(GENERAL_API))])


@router.get("/status")
def api_status() -> dict:
    return {
        "status": "ok",
        "environment": settings.app_env,
        "time": datetime.now(timezone.utc).isoformat(),
    }
