"""Integration tests for CORS middleware with FastAPI."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.testclient import TestClient

from src.config.cors_config import CORSConfiguration
from tests.helpers import API


def create_app_with_cors(cors_config: CORSConfiguration) -> FastAPI:
    """Create a test app with CORS middleware."""
    app = FastAPI()
    app.add_middleware(CORSMiddleware, **cors_config.get_middleware_config())

    @app.post("/auth/refresh")
    async def refresh_endpoint():
        return {"message": "success"}

    return app


class TestCORSMiddlewareIntegration:
    """Integration tests for CORS middleware."""

    def test_allowed_origin_gets_credentials(self):
        app = create_app_with_cors(CORSConfiguration.for_production("https://example.com"))
        client = TestClient(app)

        response = client.post("/auth/refresh", headers={"origin": "https://example.com"})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://example.com"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_blocked_origin_gets_no_cors_headers(self):
        app = create_app_with_cors(CORSConfiguration.for_production("https://example.com"))
        client = TestClient(app)

        response = client.post("/auth/refresh", headers={"origin": "https://evil.com"})

        assert "access-control-allow-origin" not in response.headers

    def test_regex_origin(self):
        config = CORSConfiguration.for_production("", allow_origin_regex=r"^https://.*\.example\.com$")
        client = TestClient(create_app_with_cors(config))

        response = client.post("/auth/refresh", headers={"origin": "https://app.example.com"})

        assert response.headers["access-control-allow-origin"] == "https://app.example.com"

    def test_preflight_request(self):
        app = create_app_with_cors(CORSConfiguration.for_production("https://example.com"))
        client = TestClient(app)

        response = client.options(
            "/auth/refresh",
            headers={
                "origin": "https://example.com",
                "access-control-request-method": "POST",
                "access-control-request-headers": "content-type,x-csrf-token",
            },
        )

        assert response.status_code == 200
        assert "POST" in response.headers["access-control-allow-methods"]
        assert "x-csrf-token" in response.headers["access-control-allow-headers"]
        assert response.headers["access-control-max-age"] == "3600"


class TestApplicationCORS:
    """The real application in development mode."""

    async def test_dev_origin_preflight_on_refresh(self, client):
        response = await client.options(
            f"{API}/auth/refresh",
            headers={"origin": "http://localhost:3000", "access-control-request-method": "POST"},
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.headers["access-control-allow-credentials"] == "true"

    async def test_foreign_origin_preflight_rejected(self, client):
        response = await client.options(
            f"{API}/auth/refresh",
            headers={"origin": "https://evil.com", "access-control-request-method": "POST"},
        )

        assert response.status_code == 400
