"""
Request DTOs for authentication endpoints.

RegisterRequest   — POST /auth/register
VerifyOtpRequest  — POST /auth/verify-otp
LoginRequest      — POST /auth/login

Fields are optional at the schema level; AccountService owns the
"required"/format rules so every entry point reports them the same way.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    """Request body for POST /auth/verify-otp.

    ``otp`` is the 6-digit code sent to the email address at registration.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    otp: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None
