"""Tests for the terminal fault handler."""

import pytest
from fastapi.testclient import TestClient

from messagemind.app import App
from messagemind.errors import MalformedBodyError
from messagemind.web.server import create_fastapi_app

ALLOWED_ORIGIN = "http://localhost:5173"


@pytest.fixture
def build_client(config_factory):
    """Client for an app with failing routes in the given environment."""

    def build(environment: str) -> TestClient:
        config = config_factory(environment=environment)
        fastapi_app = create_fastapi_app(App(config), config)

        async def explode() -> None:
            raise RuntimeError("kaboom")

        async def bad_attachment() -> None:
            raise MalformedBodyError("Attachment is not valid base64")

        fastapi_app.add_api_route("/api/explode", explode)
        fastapi_app.add_api_route("/api/attachment", bad_attachment)
        return TestClient(fastapi_app)

    return build


class TestUnhandledFaults:
    """Tests for faults raised inside route handlers."""

    def test_development_includes_message(self, build_client):
        """Test that development responses carry the fault text."""
        response = build_client("development").get("/api/explode")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "message": "kaboom"}

    def test_production_hides_message(self, build_client):
        """Test that production responses do not leak the fault text."""
        response = build_client("production").get("/api/explode")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_test_environment_hides_message(self, build_client):
        """Test that only development exposes fault details."""
        response = build_client("test").get("/api/explode")
        assert response.status_code == 500
        assert "message" not in response.json()

    def test_process_keeps_serving_after_fault(self, build_client):
        """Test that a fault does not take the app down."""
        client = build_client("production")
        assert client.get("/api/explode").status_code == 500
        assert client.get("/api/explode").status_code == 500
        assert client.get("/api/health").status_code == 200

    def test_fault_response_keeps_cors_headers(self, build_client):
        """Test that 500 responses still carry CORS headers for allowed origins."""
        response = build_client("production").get("/api/explode", headers={"Origin": ALLOWED_ORIGIN})
        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == ALLOWED_ORIGIN
        assert response.headers["access-control-allow-credentials"] == "true"


class TestApiErrors:
    """Tests for errors that carry a kind."""

    def test_kind_maps_to_status(self, build_client):
        """Test that an ApiError raised by a route keeps its status and type."""
        response = build_client("production").get("/api/attachment")
        assert response.status_code == 400
        assert response.json() == {"error": "Attachment is not valid base64", "type": "malformed_body"}

    def test_body_errors_are_not_500(self, build_client):
        """Test that body stage errors bypass the generic 500 response."""
        response = build_client("production").post(
            "/api/health", content=b"{bad", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["type"] == "malformed_body"
        assert response.json()["error"] != "Internal server error"
