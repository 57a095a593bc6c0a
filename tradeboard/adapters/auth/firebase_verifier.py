from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from tradeboard.core.auth.errors import InvalidTokenError
from tradeboard.core.auth.models import AuthClaims

logger = logging.getLogger(__name__)

APP_NAME = "tradeboard"


def unescape_private_key(raw: Optional[str]) -> Optional[str]:
    """Turn the literal ``\\n`` sequences env files carry back into newlines."""
    if raw is None:
        return None
    return raw.replace("\\n", "\n")


@dataclass(frozen=True)
class FirebaseServiceAccount:
    project_id: str
    client_email: str
    private_key: str
    private_key_id: Optional[str] = None
    client_id: Optional[str] = None
    client_cert_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "FirebaseServiceAccount":
        project_id = os.getenv("FIREBASE_PROJECT_ID")
        client_email = os.getenv("FIREBASE_CLIENT_EMAIL")
        private_key = unescape_private_key(os.getenv("FIREBASE_PRIVATE_KEY"))
        missing = [
            name
            for name, value in (
                ("FIREBASE_PROJECT_ID", project_id),
                ("FIREBASE_CLIENT_EMAIL", client_email),
                ("FIREBASE_PRIVATE_KEY", private_key),
            )
            if not value
        ]
        if missing:
            raise RuntimeError(f"{', '.join(missing)} not set")
        return cls(
            project_id=project_id or "",
            client_email=client_email or "",
            private_key=private_key or "",
            private_key_id=os.getenv("FIREBASE_PRIVATE_KEY_ID"),
            client_id=os.getenv("FIREBASE_CLIENT_ID"),
            client_cert_url=os.getenv("FIREBASE_CLIENT_CERT_URL"),
        )

    def to_certificate(self) -> dict[str, Any]:
        cert = {
            "type": "service_account",
            "project_id": self.project_id,
            "private_key_id": self.private_key_id,
            "private_key": self.private_key,
            "client_email": self.client_email,
            "client_id": self.client_id,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
            "client_x509_cert_url": self.client_cert_url,
        }
        return {key: value for key, value in cert.items() if value is not None}


def initialize_firebase_app(account: FirebaseServiceAccount) -> firebase_admin.App:
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass
    app = firebase_admin.initialize_app(
        credentials.Certificate(account.to_certificate()),
        name=APP_NAME,
    )
    logger.info("Firebase Admin initialized project=%s", account.project_id)
    return app


class FirebaseTokenVerifier:
    def __init__(self, app: firebase_admin.App, *, check_revoked: bool = False) -> None:
        self._app = app
        self._check_revoked = check_revoked

    async def verify(self, token: str) -> AuthClaims:
        # verify_id_token may fetch Google's public certs; keep it off the event loop.
        try:
            return await asyncio.to_thread(
                firebase_auth.verify_id_token,
                token,
                app=self._app,
                check_revoked=self._check_revoked,
            )
        except (
            firebase_auth.InvalidIdTokenError,
            firebase_auth.CertificateFetchError,
            firebase_auth.UserDisabledError,
            ValueError,
        ) as exc:
            raise InvalidTokenError(type(exc).__name__) from exc
