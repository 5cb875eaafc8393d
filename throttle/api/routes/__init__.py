from __future__ import annotations

from throttle.api.routes.admin import router as admin_router
from throttle.api.routes.contact import router as contact_router
from throttle.api.routes.health import router as health_router
from throttle.api.routes.status import router as status_router

__all__ = ["admin_router", "contact_router", "health_router", "status_router"]
