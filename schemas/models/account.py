"""
Account document model.

Maps to the `accounts` MongoDB collection.

otp_hash stores SHA-256(otp_code) — the plain OTP is never stored.
otp_hash and otp_issued_at are set together at registration and cleared
together when the account is verified; a verified account never carries
OTP fields again.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from schemas.models.base import MongoBaseModel
from shared.datetime_utils import as_utc


class AccountDoc(MongoBaseModel):
    """Document model for the `accounts` collection."""

    email: str
    password_hash: str
    name: Optional[str] = None
    otp_hash: Optional[str] = None
    otp_issued_at: Optional[datetime] = None
    verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_pending_otp(self) -> bool:
        return self.otp_hash is not None and self.otp_issued_at is not None

    def otp_expired(self, now: datetime, ttl: timedelta) -> bool:
        """True when *now* is past the end of the OTP validity window.

        An account without a pending OTP counts as expired.
        """
        if not self.has_pending_otp:
            return True
        return as_utc(now) > as_utc(self.otp_issued_at) + ttl
