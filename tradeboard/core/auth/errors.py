from __future__ import annotations


class AuthError(Exception):
    pass


class MissingTokenError(AuthError):
    """No bearer token on the request."""


class InvalidTokenError(AuthError):
    """The token was rejected or could not be verified."""


class InvalidCredentialsError(AuthError):
    pass


class LoginUnavailableError(AuthError):
    """Login was requested but no token issuer is configured."""
