"""OpenAPI customizations.

Enriches the generated schema with:
- Tags metadata
- ``X-Admin-Key`` security scheme, required on admin paths only
- A documented 429 response on every rate limited operation
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

ADMIN_PREFIX = "/admin/"

TAGS = [
    {"name": "Contact", "description": "Public contact form (strict rate limit)."},
    {"name": "API", "description": "General API traffic (loose rate limit)."},
    {"name": "Admin", "description": "Inspect and reset rate limit state."},
    {"name": "Health", "description": "Liveness checks (never rate limited)."},
]

THROTTLED_RESPONSE = {
    "description": "Too many requests for this client in the current window.",
    "headers": {
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {"schema": {"type": "string", "format": "date-time"}},
        "Retry-After": {"schema": {"type": "integer"}},
    },
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "error": {"type": "string"},
                    "retryAfter": {"type": "integer"},
                },
                "required": ["error", "retryAfter"],
            }
        }
    },
}


def apply_openapi_customizations(app: FastAPI, *, throttled_tags: set[str] | None = None) -> None:
    """Patch the app's OpenAPI generation.

    Args:
        app: Application to patch.
        throttled_tags: Tags whose operations get the 429 response documented.
    """

    throttled = throttled_tags or {"Contact", "API"}
    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "AdminKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-Admin-Key",
                "description": "Admin key, required when APP_ADMIN_API_KEY is set.",
            },
        )

        tags = schema.setdefault("tags", [])
        known = {t.get("name") for t in tags}
        tags.extend(tag for tag in TAGS if tag["name"] not in known)

        for path, methods in schema.get("paths", {}).items():
            for operation in methods.values():
                if not isinstance(operation, dict):
                    continue
                if path.startswith(ADMIN_PREFIX) or path == ADMIN_PREFIX.rstrip("/"):
                    operation["security"] = [{"AdminKeyAuth": []}]
                if throttled.intersection(operation.get("tags", [])):
                    operation.setdefault("responses", {}).setdefault("429", THROTTLED_RESPONSE)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
