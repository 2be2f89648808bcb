"""
Bearer token issuance and validation (PyJWT).

Tokens are signed with RS256 when a key pair is configured, HS256 with
JWT_SECRET otherwise. The subject claim carries the account email. Keys are
read once, when the service is constructed at startup.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from config import JWTSettings
from errors import InvalidTokenError, TokenExpiredError


class TokenService:
    def __init__(
        self,
        settings: JWTSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self._ttl = timedelta(seconds=settings.access_token_ttl_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        if settings.use_rs256:
            # Support keys provided via env with literal \n sequences
            self._algorithm = "RS256"
            self._signing_key = settings.jwt_private_key.replace("\\n", "\n")
            self._verify_key = settings.jwt_public_key.replace("\\n", "\n")
        else:
            if not settings.jwt_secret:
                raise RuntimeError(
                    "JWT_SECRET must be set when RS256 keys are not provided"
                )
            self._algorithm = "HS256"
            self._signing_key = self._verify_key = settings.jwt_secret

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def issue(self, subject: str) -> str:
        """Return a signed token for *subject* that expires after the configured TTL."""
        now = self._clock()
        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(claims, self._signing_key, algorithm=self._algorithm)

    def validate(self, token: str) -> str:
        """Verify signature, issuer, audience and expiry; return the subject.

        Raises:
            TokenExpiredError: the token was valid but its ``exp`` has passed.
            InvalidTokenError: anything else wrong with the token.
        """
        try:
            claims = jwt.decode(
                token,
                self._verify_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("Invalid token")
        return subject
