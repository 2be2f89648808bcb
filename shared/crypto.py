"""
Cryptographic helpers — password hashing and OTP hashing.

Uses argon2 for passwords (via argon2-cffi) and SHA-256 for one-time codes.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()

# Verified against when an email is unknown so login timing matches a real check
_DUMMY_PASSWORD_HASH = _password_hasher.hash("healthmate-timing-equaliser")


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and a random salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for a wrong password or a
        malformed hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def burn_password_check(plain_password: str) -> None:
    """Run a full argon2 verification whose result is ignored."""
    verify_password(plain_password, _DUMMY_PASSWORD_HASH)


def hash_otp(otp_code: str) -> str:
    """Return the hex-encoded SHA-256 digest of *otp_code*.

    The plaintext OTP is never persisted; only this digest is stored.
    """
    return hashlib.sha256(otp_code.encode("utf-8")).hexdigest()


def otp_matches(otp_code: str, otp_hash: str) -> bool:
    """Constant-time check that *otp_code* hashes to *otp_hash*."""
    return hmac.compare_digest(hash_otp(otp_code), otp_hash)
