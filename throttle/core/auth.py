"""Admin key check for the out-of-band reset endpoints.

The limiter itself authenticates nobody. This only guards the admin
surface: when ``APP_ADMIN_API_KEY`` is set, callers must send it in
``X-Admin-Key``; when unset, the admin routes are open (local/ops use).
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Annotated

from fastapi import Header

from throttle.core.config import settings
from throttle.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)


def validate_admin_key(provided_key: str | None, expected_key: str | None) -> None:
    """Compare the provided key with the configured one.

    Pure validation logic without FastAPI dependencies for easy testing.

    Raises:
        AuthenticationAppError: If a key is configured and the provided one
            is missing or different.
    """
    if not expected_key:
        return

    if not provided_key or not hmac.compare_digest(provided_key.encode(), expected_key.encode()):
        logger.warning(
            "admin_auth.failed",
            extra={
                "key_present": bool(provided_key),
                "key_hash": hashlib.sha256((provided_key or "").encode()).hexdigest()[:16],
            },
        )
        raise AuthenticationAppError(
            code="invalid_admin_key",
            message="Invalid or missing admin key",
            details={"hint": "Send the configured key in the X-Admin-Key header"},
        )


async def verify_admin_key(
    x_admin_key: Annotated[str | None, Header(alias="X-Admin-Key")] = None,
) -> None:
    """FastAPI dependency guarding admin routes.

    Usage:
        @router.post("/admin/...", dependencies=[Depends(verify_admin_key)])
    """
    validate_admin_key(x_admin_key, settings.app.admin_api_key)
