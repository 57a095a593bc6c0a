from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from tradeboard.core.auth.errors import InvalidTokenError
from tradeboard.core.auth.models import AuthClaims, IssuedToken

ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(hours=24)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JwtTokenCodec:
    """Issues and verifies locally signed HS256 tokens carrying an ``email`` claim."""

    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock

    def issue(self, subject: str) -> IssuedToken:
        issued_at = self._clock()
        expires_at = issued_at + self._ttl
        payload = {
            "email": subject,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        return IssuedToken(token=token, subject=subject, expires_at=expires_at)

    def decode(self, token: str) -> AuthClaims:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Malformed or unsigned token: {type(exc).__name__}") from exc

    async def verify(self, token: str) -> AuthClaims:
        return self.decode(token)


class StaticAccountChecker:
    """Single configured login account for development setups."""

    def __init__(self, email: Optional[str], password: Optional[str]) -> None:
        self._email = email or ""
        self._password = password or ""

    def check(self, email: str, password: str) -> bool:
        if not self._email or not self._password:
            return False
        email_ok = hmac.compare_digest(email.encode("utf-8"), self._email.encode("utf-8"))
        password_ok = hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        return email_ok and password_ok
