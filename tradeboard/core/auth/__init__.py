"""Bearer-token authentication domain."""

from tradeboard.core.auth.errors import (
    AuthError,
    InvalidCredentialsError,
    InvalidTokenError,
    LoginUnavailableError,
    MissingTokenError,
)
from tradeboard.core.auth.models import AuthClaims, IssuedToken
from tradeboard.core.auth.ports import CredentialChecker, TokenIssuer, TokenVerifier
from tradeboard.core.auth.service import AuthService, extract_bearer_token

__all__ = [
    "AuthClaims",
    "AuthError",
    "AuthService",
    "CredentialChecker",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "IssuedToken",
    "LoginUnavailableError",
    "MissingTokenError",
    "TokenIssuer",
    "TokenVerifier",
    "extract_bearer_token",
]
