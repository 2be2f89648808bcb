"""
Shared fixtures: in-memory stores, a recording notifier, a canned diagnoser
and a controllable clock. Nothing here touches the network or MongoDB.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from config import JWTSettings
from repositories.memory import InMemoryAccountStore, InMemoryDiagnosisStore
from services.account_service import AccountService
from services.diagnosis_service import DiagnosisService
from services.token_service import TokenService

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Notifier double. Flip ``result``, ``error`` or ``delay`` to simulate failures."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, object, str]] = []
        self.result = True
        self.error = None
        self.delay = 0.0

    async def send_otp(self, email, name, otp_code):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.sent.append((email, name, otp_code))
        return self.result

    def code_for(self, email: str) -> str:
        return next(code for to, _, code in reversed(self.sent) if to == email)


class FakeDiagnoser:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.answer = "Likely a common cold. Rest and drink fluids."
        self.error = None

    async def diagnose(self, symptoms):
        self.calls.append(symptoms)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def account_store():
    return InMemoryAccountStore()


@pytest.fixture
def diagnosis_store():
    return InMemoryDiagnosisStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def diagnoser():
    return FakeDiagnoser()


@pytest.fixture
def jwt_settings():
    return JWTSettings(
        jwt_secret="test-secret",
        jwt_private_key="",
        jwt_public_key="",
        jwt_issuer="healthmate",
        jwt_audience="healthmate.api",
        access_token_ttl_seconds=3600,
    )


@pytest.fixture
def token_service(jwt_settings):
    # Real clock: PyJWT checks exp against the wall clock
    return TokenService(jwt_settings)


@pytest.fixture
def account_service(account_store, notifier, token_service, clock):
    return AccountService(
        account_store,
        notifier,
        token_service,
        otp_ttl=timedelta(minutes=5),
        notifier_timeout=0.5,
        store_timeout=0.5,
        clock=clock,
    )


@pytest.fixture
def diagnosis_service(diagnosis_store, diagnoser, clock):
    return DiagnosisService(diagnosis_store, diagnoser, clock=clock)
