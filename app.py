"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings, EmailSettings
from errors import register_error_handlers
from infrastructure.diagnosis.gemini import GeminiDiagnoser
from infrastructure.diagnosis.protocol import SymptomDiagnoser
from infrastructure.email.console import ConsoleNotifier
from infrastructure.email.protocol import Notifier
from infrastructure.email.zeptomail import ZeptoMailNotifier
from infrastructure.http_client import HttpClient
from repositories.account_repository import ACCOUNTS_COLLECTION, MongoAccountRepository
from repositories.diagnosis_repository import (
    DIAGNOSIS_COLLECTION,
    MongoDiagnosisRepository,
)
from repositories.protocol import AccountStore, DiagnosisStore
from routes.auth_routes import router as auth_router
from routes.diagnosis_routes import router as diagnosis_router
from routes.health_routes import router as health_router
from services.account_service import AccountService
from services.diagnosis_service import DiagnosisService
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging
from workers.expiry_reaper import ExpiryReaper

log = get_logger(__name__)


def build_notifier(
    settings: EmailSettings,
    http_client: HttpClient,
    otp_ttl_minutes: int,
    *,
    production: bool = False,
) -> Notifier:
    """Pick the OTP notifier named by EMAIL_PROVIDER.

    The console notifier never delivers mail, so production refuses it.
    """
    provider = settings.email_provider.lower()
    if provider == "zeptomail":
        return ZeptoMailNotifier(settings, http_client, otp_ttl_minutes=otp_ttl_minutes)
    if provider == "console":
        if production:
            raise ValueError("EMAIL_PROVIDER=console is not allowed in production")
        return ConsoleNotifier()
    raise ValueError(f"Unknown EMAIL_PROVIDER: {settings.email_provider!r}")


def wire_services(
    app: FastAPI,
    settings: AppSettings,
    *,
    account_store: AccountStore,
    diagnosis_store: DiagnosisStore,
    notifier: Notifier,
    diagnoser: SymptomDiagnoser,
    clock: Optional[Callable[[], datetime]] = None,
) -> ExpiryReaper:
    """Build the services on top of the given adapters and put them on app.state.

    Returns the (not yet started) ExpiryReaper for the caller to own.
    """
    otp_ttl = timedelta(seconds=settings.auth.otp_ttl_seconds)
    tokens = TokenService(settings.jwt)

    app.state.settings = settings
    app.state.token_service = tokens
    app.state.account_service = AccountService(
        account_store,
        notifier,
        tokens,
        otp_ttl=otp_ttl,
        notifier_timeout=settings.auth.notifier_timeout_seconds,
        store_timeout=settings.auth.store_timeout_seconds,
        clock=clock,
    )
    app.state.diagnosis_service = DiagnosisService(diagnosis_store, diagnoser, clock=clock)

    return ExpiryReaper(
        account_store,
        otp_ttl,
        interval_seconds=settings.auth.cleanup_interval_seconds,
        clock=clock,
    )


def include_routers(app: FastAPI) -> None:
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(diagnosis_router)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging.log_level, settings.logging.log_format)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        email_http = HttpClient(timeout=settings.auth.notifier_timeout_seconds)
        try:
            notifier = build_notifier(
                settings.email,
                email_http,
                otp_ttl_minutes=max(1, settings.auth.otp_ttl_seconds // 60),
                production=settings.is_production,
            )
        except ValueError:
            await email_http.aclose()
            raise

        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db

        account_store = MongoAccountRepository(db[ACCOUNTS_COLLECTION])
        diagnosis_store = MongoDiagnosisRepository(db[DIAGNOSIS_COLLECTION])
        await account_store.ensure_indexes()
        await diagnosis_store.ensure_indexes()

        gemini_http = HttpClient(timeout=settings.diagnosis.gemini_timeout_seconds)

        reaper = wire_services(
            app,
            settings,
            account_store=account_store,
            diagnosis_store=diagnosis_store,
            notifier=notifier,
            diagnoser=GeminiDiagnoser(settings.diagnosis, gemini_http),
        )
        if settings.auth.cleanup_enabled:
            reaper.start()

        log.info("app_started", env=settings.env, db=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await reaper.stop()
        await email_http.aclose()
        await gemini_http.aclose()
        await mongo_client.close()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    include_routers(app)

    return app
