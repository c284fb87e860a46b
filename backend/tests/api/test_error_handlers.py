"""Tests for the error translation boundary."""

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from api.error_handlers import error_code_for_status, register_exception_handlers
from modules.auth.exceptions import InsufficientRoleError, InvalidTokenError
from shared.exceptions import ConfigurationError, NotFoundError


class Widget(BaseModel):
    name: str = Field(..., min_length=2)
    size: int


def build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/not-found")
    async def not_found():
        raise NotFoundError("Widget not found", code="WIDGET_NOT_FOUND", details={"id": "w-1"})

    @app.get("/unauthenticated")
    async def unauthenticated():
        raise InvalidTokenError()

    @app.get("/forbidden")
    async def forbidden():
        raise InsufficientRoleError(["Admin"], "Student")

    @app.get("/misconfigured")
    async def misconfigured():
        raise ConfigurationError("JWT_SECRET is not configured", code="JWT_SECRET_MISSING")

    @app.get("/http-error")
    async def http_error():
        raise HTTPException(status_code=429, detail="Slow down")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    @app.post("/widgets")
    async def create_widget(widget: Widget):
        return widget

    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(build_app(), raise_server_exceptions=False)


class TestDomainErrors:
    def test_not_found_envelope(self, client):
        response = client.get("/not-found")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Widget not found",
            "code": "WIDGET_NOT_FOUND",
            "details": {"id": "w-1"},
        }

    def test_unauthenticated_sets_challenge_header(self, client):
        response = client.get("/unauthenticated")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_forbidden_has_no_challenge_header(self, client):
        response = client.get("/forbidden")

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"
        assert "www-authenticate" not in response.headers

    def test_configuration_error_is_500(self, client):
        response = client.get("/misconfigured")

        assert response.status_code == 500
        assert response.json()["code"] == "JWT_SECRET_MISSING"


class TestFrameworkErrors:
    def test_validation_error_is_400_with_fields(self, client):
        response = client.post("/widgets", json={"name": "x"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert body["error"] == "Validation failed"
        fields = {d["field"] for d in body["details"]}
        assert fields == {"name", "size"}

    def test_malformed_json(self, client):
        response = client.post(
            "/widgets",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_route(self, client):
        response = client.get("/nowhere")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found", "code": "NOT_FOUND"}

    def test_method_not_allowed(self, client):
        response = client.delete("/boom")

        assert response.status_code == 405
        assert response.json()["code"] == "METHOD_NOT_ALLOWED"

    def test_http_exception_keeps_detail(self, client):
        response = client.get("/http-error")

        assert response.status_code == 429
        assert response.json() == {"success": False, "error": "Slow down", "code": "RATE_LIMITED"}


class TestUnhandledErrors:
    def test_unhandled_error_is_generic(self, client):
        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
        }

    def test_debug_includes_traceback(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        client = TestClient(build_app(), raise_server_exceptions=False)

        response = client.get("/boom")

        assert response.status_code == 500
        assert "kaboom" in "".join(response.json()["details"]["traceback"])


class TestErrorCodeForStatus:
    @pytest.mark.parametrize(
        "status_code,expected",
        [
            (400, "BAD_REQUEST"),
            (401, "UNAUTHORIZED"),
            (409, "CONFLICT"),
            (418, "HTTP_ERROR"),
            (502, "INTERNAL_ERROR"),
        ],
    )
    def test_mapping(self, status_code, expected):
        assert error_code_for_status(status_code) == expected
