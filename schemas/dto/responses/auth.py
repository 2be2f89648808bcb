"""
Response DTOs for authentication endpoints.

AccountResponse — GET /auth/me  (200)
LoginResponse   — POST /auth/login  (200)

Keys are camelCase on the wire to match the web client.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemas.models.account import AccountDoc


class AccountResponse(BaseModel):
    """Public view of an account; credentials and OTP state never leave the server."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    email: str
    name: Optional[str] = None
    verified: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, account: AccountDoc) -> "AccountResponse":
        return cls(
            id=str(account.id),
            email=account.email,
            name=account.name,
            verified=account.verified,
            created_at=account.created_at,
        )


class LoginResponse(BaseModel):
    """Response body for POST /auth/login (200)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    token: str
    account_id: str
