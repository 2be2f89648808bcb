"""
Account endpoints.

POST   /auth/register    — create an unverified account and mail its OTP
POST   /auth/verify-otp  — confirm the email with the OTP
POST   /auth/login       — exchange credentials for a bearer token
GET    /auth/me          — the caller's account
DELETE /auth             — delete the caller's account and its diagnosis history

Errors are raised by AccountService and rendered by the handlers in errors.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import (
    get_account_service,
    get_current_identity,
    get_diagnosis_service,
)
from schemas.dto.requests.auth import LoginRequest, RegisterRequest, VerifyOtpRequest
from schemas.dto.responses.auth import AccountResponse, LoginResponse
from schemas.dto.responses.common import ERROR_RESPONSES, MessageResponse
from services.account_service import AccountService, AuthContext, VerifyOutcome
from services.diagnosis_service import DiagnosisService

router = APIRouter(prefix="/auth", tags=["auth"], responses=ERROR_RESPONSES)

_VERIFY_MESSAGES = {
    VerifyOutcome.VERIFIED: "Email verified successfully!",
    VerifyOutcome.ALREADY_VERIFIED: "User already verified!",
}


@router.post("/register", response_model=MessageResponse)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    await accounts.register(body.email, body.password, body.name)
    return MessageResponse(message="OTP sent to email!")


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_otp(
    body: VerifyOtpRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    outcome = await accounts.verify_otp(body.email, body.otp)
    return MessageResponse(message=_VERIFY_MESSAGES[outcome])


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    result = await accounts.login(body.email, body.password)
    return LoginResponse(token=result.token, account_id=result.account_id)


@router.get("/me", response_model=AccountResponse, response_model_by_alias=True)
async def me(
    identity: AuthContext = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
) -> AccountResponse:
    return AccountResponse.from_doc(await accounts.get_current(identity))


@router.delete("", response_model=MessageResponse)
async def delete_account(
    identity: AuthContext = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
    diagnoses: DiagnosisService = Depends(get_diagnosis_service),
) -> MessageResponse:
    account = await accounts.get_current(identity)
    # Reports go first so a failed cascade leaves the owner able to retry
    await diagnoses.delete_all_for_user(account.id)
    await accounts.delete(identity)
    return MessageResponse(message="User account deleted successfully")
