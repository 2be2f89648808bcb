"""
Account lifecycle: registration, OTP verification, login, self-service
lookup and deletion.

State machine per account:

    register ──► unverified (otp_hash, otp_issued_at set)
                    │
                    ├── verify_otp within the TTL ──► verified (OTP fields cleared)
                    └── TTL elapsed ──► removed by ExpiryReaper

Every failure is raised as a typed AppError; the boundary maps it to a
response. Calls into the store and the notifier are bounded by timeouts.
Registration persists the account first and removes it again if the OTP
cannot be delivered, so no account outlives a failed send and no OTP is
ever mailed for an account that was not stored.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from bson import ObjectId

from errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidOtpError,
    NotFoundError,
    NotifierError,
    OtpExpiredError,
    StoreUnavailableError,
    UnverifiedError,
    ValidationError,
)
from infrastructure.email.protocol import Notifier
from repositories.protocol import AccountStore
from schemas.models.account import AccountDoc
from services.token_service import TokenService
from shared.crypto import burn_password_check, hash_otp, hash_password, otp_matches, verify_password
from shared.datetime_utils import utcnow
from shared.generators import generate_otp_code
from shared.logging import get_logger, mask_email
from shared.validators import (
    normalize_email,
    validate_email,
    validate_otp_format,
    validate_password,
)

log = get_logger(__name__)

T = TypeVar("T")

DEFAULT_OTP_TTL = timedelta(minutes=5)


class VerifyOutcome(str, Enum):
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, resolved from a validated bearer token."""

    email: str


@dataclass(frozen=True)
class LoginResult:
    token: str
    account_id: str


class AccountService:
    def __init__(
        self,
        store: AccountStore,
        notifier: Notifier,
        tokens: TokenService,
        *,
        otp_ttl: timedelta = DEFAULT_OTP_TTL,
        notifier_timeout: float = 10.0,
        store_timeout: float = 5.0,
        clock: Optional[Callable[[], datetime]] = None,
        otp_generator: Callable[[], str] = generate_otp_code,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._tokens = tokens
        self._otp_ttl = otp_ttl
        self._notifier_timeout = notifier_timeout
        self._store_timeout = store_timeout
        self._clock = clock or utcnow
        self._otp_generator = otp_generator

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        """Await a store call, turning a timeout into StoreUnavailableError."""
        try:
            return await asyncio.wait_for(awaitable, self._store_timeout)
        except asyncio.TimeoutError as e:
            raise StoreUnavailableError("Account store unavailable") from e

    # ── Registration ─────────────────────────────────────────────────────────

    async def register(
        self, email: Optional[str], password: Optional[str], name: Optional[str] = None
    ) -> None:
        """Create an unverified account and mail its OTP.

        Raises:
            ValidationError: missing or malformed email/password.
            ConflictError: the email already has an account.
            NotifierError: the OTP could not be delivered (nothing is kept).
            StoreUnavailableError: the store failed or timed out.
        """
        if not email or not password:
            raise ValidationError("Email and password are required!")

        email = normalize_email(email)
        if not validate_email(email):
            raise ValidationError("Invalid email address", field="email")

        is_valid, missing = validate_password(password)
        if not is_valid:
            raise ValidationError(
                "Password does not meet requirements",
                field="password",
                details=missing,
            )

        if await self._bounded(self._store.find_by_email(email)) is not None:
            raise ConflictError("Email already registered!", field="email")

        now = self._clock()
        otp_code = self._otp_generator()
        account = AccountDoc(
            id=ObjectId(),
            email=email,
            password_hash=await asyncio.to_thread(hash_password, password),
            name=(name or "").strip() or None,
            otp_hash=hash_otp(otp_code),
            otp_issued_at=now,
            verified=False,
            created_at=now,
            updated_at=now,
        )

        # A concurrent registration for the same email loses here with ConflictError
        try:
            await self._bounded(self._store.insert(account))
        except StoreUnavailableError:
            # The write may still have landed; remove it if so
            await self._discard(account.id, reason="insert_failed")
            raise
        except asyncio.CancelledError:
            await asyncio.shield(self._discard(account.id, reason="cancelled"))
            raise

        try:
            sent = await asyncio.wait_for(
                self._notifier.send_otp(email, account.name, otp_code),
                self._notifier_timeout,
            )
        except asyncio.CancelledError:
            # Roll back even when the request task is cancelled
            await asyncio.shield(self._discard(account.id, reason="cancelled"))
            raise
        except Exception as e:
            await self._discard(account.id, reason=type(e).__name__)
            raise NotifierError(
                "Failed to send OTP email. Please try again later."
            ) from e

        if not sent:
            await self._discard(account.id, reason="notifier_rejected")
            raise NotifierError("Failed to send OTP email. Please try again later.")

        log.info(
            "account_registered",
            account_id=str(account.id),
            email=mask_email(email),
            has_name=account.name is not None,
        )

    async def _discard(self, account_id: ObjectId, reason: str) -> None:
        """Compensating delete for a registration that did not complete."""
        try:
            await self._bounded(self._store.delete(account_id))
        except StoreUnavailableError:
            # Still unverified with an OTP timestamp, so the reaper removes it
            log.error(
                "registration_rollback_failed",
                account_id=str(account_id),
                reason=reason,
            )
            return
        log.warning("registration_rolled_back", account_id=str(account_id), reason=reason)

    # ── Verification ─────────────────────────────────────────────────────────

    async def verify_otp(self, email: Optional[str], otp: Optional[str]) -> VerifyOutcome:
        """Confirm ownership of *email* with the code mailed at registration.

        Checks run in a fixed order: account exists, not already verified,
        code matches, code not expired.

        Returns:
            VerifyOutcome.VERIFIED on first success, ALREADY_VERIFIED when the
            account was verified before (idempotent).

        Raises:
            ValidationError, NotFoundError, InvalidOtpError, OtpExpiredError,
            StoreUnavailableError.
        """
        if not email or not otp:
            raise ValidationError("Email and OTP are required!")

        account = await self._bounded(self._store.find_by_email(normalize_email(email)))
        if account is None:
            raise NotFoundError("User not found!")

        if account.verified:
            return VerifyOutcome.ALREADY_VERIFIED

        if (
            not account.has_pending_otp
            or not validate_otp_format(otp)
            or not otp_matches(otp, account.otp_hash)
        ):
            raise InvalidOtpError("Invalid OTP!")

        now = self._clock()
        if account.otp_expired(now, self._otp_ttl):
            raise OtpExpiredError("OTP expired!")

        # Applies only to the exact unverified state read above; a concurrent
        # sweep or verification makes it a no-op
        applied = await self._bounded(
            self._store.update(
                account.id,
                {
                    "verified": True,
                    "otp_hash": None,
                    "otp_issued_at": None,
                    "updated_at": now,
                },
                expected={"verified": False, "otp_issued_at": account.otp_issued_at},
            )
        )
        if not applied:
            current = await self._bounded(self._store.find_by_id(account.id))
            if current is None:
                raise NotFoundError("User not found!")
            if current.verified:
                return VerifyOutcome.ALREADY_VERIFIED
            raise OtpExpiredError("OTP expired!")

        log.info("account_verified", account_id=str(account.id))
        return VerifyOutcome.VERIFIED

    # ── Login ────────────────────────────────────────────────────────────────

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """Exchange credentials for a bearer token.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        A correct password on an unverified account raises UnverifiedError.
        """
        if not email or not password:
            raise ValidationError("Email and password are required!")

        account = await self._bounded(self._store.find_by_email(normalize_email(email)))
        if account is None:
            await asyncio.to_thread(burn_password_check, password)
            raise InvalidCredentialsError("Invalid credentials")

        if not await asyncio.to_thread(verify_password, password, account.password_hash):
            raise InvalidCredentialsError("Invalid credentials")

        if not account.verified:
            raise UnverifiedError("Email not verified")

        token = self._tokens.issue(account.email)
        log.info("login_success", account_id=str(account.id))
        return LoginResult(token=token, account_id=str(account.id))

    # ── Self-service ─────────────────────────────────────────────────────────

    async def get_current(self, identity: AuthContext) -> AccountDoc:
        account = await self._bounded(self._store.find_by_email(identity.email))
        if account is None:
            raise NotFoundError("User not found")
        return account

    async def delete(self, identity: AuthContext) -> AccountDoc:
        """Hard-delete the caller's account and return what was removed."""
        account = await self.get_current(identity)
        if not await self._bounded(self._store.delete(account.id)):
            raise NotFoundError("User not found")
        log.info("account_deleted", account_id=str(account.id))
        return account
