"""Request correlation middleware.

Every request gets an id (taken from the incoming header or generated),
stored in a context variable for the duration of the request so log lines
emitted by the limiter and the handlers can be correlated.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from throttle.core.config import settings
from throttle.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id and timing header to every response.

    Throttled responses pass through here too, so a 429 carries the same
    ``X-Request-ID`` as the warning the limiter logged for it. Rate limit
    headers recorded by the limiter are copied onto any response that lacks
    them, including 4xx errors raised after the request was counted.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or uuid.uuid4().hex
    set_request_id(request_id)
    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    for name, value in getattr(request.state, "rate_limit_headers", {}).items():
        response.headers.setdefault(name, value)
    response.headers.setdefault(
        "X-Request-Duration-ms", f"{(time.perf_counter() - started) * 1000:.2f}"
    )
    return response
