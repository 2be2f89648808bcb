"""
Integration test configuration.

Builds the real routers, dependencies and services on top of the in-memory
stores and fake adapters from tests/conftest.py, wired through the same
wire_services() the production lifespan uses. No MongoDB or network.
"""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import include_routers, wire_services
from config import AppSettings, DatabaseSettings, JWTSettings
from errors import register_error_handlers


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def settings():
    return AppSettings(
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/"),
        jwt=JWTSettings(jwt_secret="test-secret", jwt_private_key="", jwt_public_key=""),
    )


@pytest.fixture
def app(settings, account_store, diagnosis_store, notifier, diagnoser):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        reaper = wire_services(
            app,
            settings,
            account_store=account_store,
            diagnosis_store=diagnosis_store,
            notifier=notifier,
            diagnoser=diagnoser,
        )
        yield
        await reaper.stop()

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    include_routers(app)
    return app


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def signup(client, notifier):
    """Register and verify an account; return bearer headers for it."""

    def _signup(email="a@x.com", password="secret1", name=None):
        body = {"email": email, "password": password}
        if name:
            body["name"] = name
        assert client.post("/auth/register", json=body).status_code == 200
        otp = notifier.code_for(email)
        assert client.post("/auth/verify-otp", json={"email": email, "otp": otp}).status_code == 200
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _signup
