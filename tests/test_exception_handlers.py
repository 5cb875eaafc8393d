"""Tests for global exception handlers."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from throttle.core.errors import (
    AppError,
    AuthenticationAppError,
    RateLimitExceededError,
    ValidationAppError,
)
from throttle.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/throttled")
    async def throttled():
        raise RateLimitExceededError(
            code="rate_limited",
            message="Slow down",
            retry_after_seconds=42,
            headers={"X-RateLimit-Remaining": "0", "Retry-After": "42"},
        )

    @app.get("/invalid")
    async def invalid():
        raise ValidationAppError(
            code="duplicate_policy",
            message="Policy already registered",
            details={"policy": "contact-form"},
        )

    @app.get("/forbidden")
    async def forbidden():
        raise AuthenticationAppError(code="invalid_admin_key", message="Invalid or missing admin key")

    return app


@pytest.fixture
def handler_client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestRateLimitExceededHandler:
    def test_returns_429_with_throttle_body(self, handler_client: TestClient) -> None:
        response = handler_client.get("/throttled")

        assert response.status_code == 429
        assert response.json() == {"error": "Slow down", "retryAfter": 42}
        assert response.headers["Retry-After"] == "42"
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_is_an_app_error(self) -> None:
        exc = RateLimitExceededError(code="rate_limited", message="m", retry_after_seconds=1)
        assert isinstance(exc, AppError)
        assert str(exc) == "m"
        assert exc.headers == {}


class TestAppErrorHandler:
    def test_validation_error_returns_400_with_details(self, handler_client: TestClient) -> None:
        response = handler_client.get("/invalid")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "duplicate_policy"
        assert error["details"] == {"policy": "contact-form"}
        assert "request_id" in error

    def test_authentication_error_returns_403(self, handler_client: TestClient) -> None:
        response = handler_client.get("/forbidden")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "invalid_admin_key"
        assert "details" not in response.json()["error"]


class TestGeneralExceptionHandler:
    def test_registered(self, app_with_handlers: FastAPI) -> None:
        assert Exception in app_with_handlers.exception_handlers
        assert RateLimitExceededError in app_with_handlers.exception_handlers

    def test_never_leaks_exception_details(self) -> None:
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("window store corrupted")))

        body = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert body["error"]["code"] == "internal_server_error"
        assert "corrupted" not in body["error"]["message"]
        assert "ValueError" not in bytes(response.body).decode()
