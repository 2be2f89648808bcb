"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Services are built once in the app lifespan and
stored on app.state; these providers only hand them out.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from errors import AuthenticationError
from schemas.models.account import AccountDoc
from services.account_service import AccountService, AuthContext
from services.diagnosis_service import DiagnosisService
from services.token_service import TokenService

# auto_error=False so a missing header goes through our AppError handler
_bearer_scheme = HTTPBearer(auto_error=False)


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_diagnosis_service(request: Request) -> DiagnosisService:
    return request.app.state.diagnosis_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> AuthContext:
    """Resolve the caller from ``Authorization: Bearer <jwt>``.

    Raises AuthenticationError / InvalidTokenError / TokenExpiredError (401).
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")
    return AuthContext(email=tokens.validate(credentials.credentials))


async def get_current_account(
    identity: AuthContext = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
) -> AccountDoc:
    """The caller's stored account; 404 if it was deleted after the token was issued."""
    return await accounts.get_current(identity)
