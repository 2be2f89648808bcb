"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _build_test_app(mongo_ok: bool = True) -> FastAPI:
    """
    Build a minimal FastAPI app with a mocked DB injected via lifespan.
    No real network connections are made.
    """
    mock_db = MagicMock()
    if mongo_ok:
        mock_db.client.admin.command = AsyncMock(return_value={"ok": 1})
    else:
        mock_db.client.admin.command = AsyncMock(
            side_effect=Exception("connection refused")
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = mock_db
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


class TestHealthEndpoint:
    def test_healthy_when_mongo_ok(self):
        app = _build_test_app(mongo_ok=True)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "checks": {"mongodb": "ok"}}

    def test_unhealthy_when_mongo_fails(self):
        app = _build_test_app(mongo_ok=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["mongodb"] == "error"

    def test_pings_admin_database(self):
        app = _build_test_app()
        with TestClient(app) as client:
            client.get("/health")
            app.state.db.client.admin.command.assert_awaited_once_with("ping")
