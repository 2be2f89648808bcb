"""
Input validators — framework-agnostic, pure functions.

All validators are stateless; the service layer decides which error to
raise from their results.
"""

from __future__ import annotations

import re
from typing import List, Tuple

import validators as _validators

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128


def normalize_email(email: str) -> str:
    """Return the canonical form of *email* used for storage and lookups.

    Emails are compared case-insensitively, so the canonical form is the
    stripped, lower-cased address.
    """
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* is a syntactically valid email address."""
    if not email:
        return False
    return bool(_validators.email(email))


def validate_password(password: str) -> Tuple[bool, List[str]]:
    """
    Validate a password against the account password policy.

    Rules:
    - 6 to 128 characters
    - At least one letter
    - At least one digit

    Returns:
        Tuple[bool, List[str]]: (is_valid, missing_requirements)
    """
    if not password:
        return False, ["Password is required"]

    missing = []

    if len(password) < PASSWORD_MIN_LENGTH:
        missing.append(f"At least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        missing.append(f"Maximum {PASSWORD_MAX_LENGTH} characters")
    if not re.search(r"[A-Za-z]", password):
        missing.append("At least one letter")
    if not re.search(r"[0-9]", password):
        missing.append("At least one number")

    return len(missing) == 0, missing


def validate_otp_format(otp: str) -> bool:
    """Return True if *otp* is exactly six decimal digits."""
    return bool(re.fullmatch(r"[0-9]{6}", otp or ""))
