from __future__ import annotations

import logging
from typing import Optional

from tradeboard.core.auth.errors import (
    InvalidCredentialsError,
    InvalidTokenError,
    LoginUnavailableError,
    MissingTokenError,
)
from tradeboard.core.auth.models import AuthClaims, IssuedToken
from tradeboard.core.auth.ports import CredentialChecker, TokenIssuer, TokenVerifier

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class AuthService:
    def __init__(
        self,
        verifier: TokenVerifier,
        issuer: Optional[TokenIssuer] = None,
        accounts: Optional[CredentialChecker] = None,
    ) -> None:
        self._verifier = verifier
        self._issuer = issuer
        self._accounts = accounts

    @property
    def login_enabled(self) -> bool:
        return self._issuer is not None and self._accounts is not None

    async def authenticate(self, authorization: Optional[str]) -> AuthClaims:
        token = extract_bearer_token(authorization)
        if token is None:
            raise MissingTokenError("No token provided")
        try:
            return await self._verifier.verify(token)
        except InvalidTokenError as exc:
            logger.warning("Token verification failed: %s", exc)
            raise
        except Exception as exc:
            logger.error("Token verification error: %s", type(exc).__name__)
            raise InvalidTokenError("Token verification failed") from exc

    def login(self, email: object, password: object) -> IssuedToken:
        if self._issuer is None or self._accounts is None:
            raise LoginUnavailableError("Login is not enabled")
        if not isinstance(email, str) or not isinstance(password, str):
            logger.info("Login rejected: non-string credentials")
            raise InvalidCredentialsError("Invalid credentials")
        if not self._accounts.check(email, password):
            logger.info("Login rejected email=%s", email)
            raise InvalidCredentialsError("Invalid credentials")
        issued = self._issuer.issue(email)
        logger.info("Login accepted email=%s expires_at=%s", email, issued.expires_at.isoformat())
        return issued
