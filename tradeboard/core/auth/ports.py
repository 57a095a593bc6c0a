from __future__ import annotations

from typing import Protocol

from tradeboard.core.auth.models import AuthClaims, IssuedToken


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> AuthClaims:
        """Return decoded claims or raise InvalidTokenError."""
        raise NotImplementedError


class TokenIssuer(Protocol):
    def issue(self, subject: str) -> IssuedToken:
        raise NotImplementedError


class CredentialChecker(Protocol):
    def check(self, email: str, password: str) -> bool:
        raise NotImplementedError
