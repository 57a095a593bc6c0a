from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from fastapi import Depends, Request

from tradeboard.adapters.auth.firebase_verifier import (
    FirebaseServiceAccount,
    FirebaseTokenVerifier,
    initialize_firebase_app,
)
from tradeboard.adapters.auth.jwt_tokens import JwtTokenCodec, StaticAccountChecker
from tradeboard.adapters.sheets.google_sheets import GoogleSheetsConfig, GoogleSheetsReader
from tradeboard.api.errors import ApiError
from tradeboard.api.settings import ApiSettings
from tradeboard.core.auth.errors import InvalidTokenError, MissingTokenError
from tradeboard.core.auth.models import AuthClaims
from tradeboard.core.auth.service import AuthService
from tradeboard.core.sheets.service import TradingSheetsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceContainer:
    settings: ApiSettings
    auth: AuthService
    sheets: TradingSheetsService


def build_auth_service(settings: ApiSettings) -> AuthService:
    if settings.auth_mode == "jwt":
        codec = JwtTokenCodec(
            settings.jwt_secret or "",
            ttl=timedelta(hours=settings.jwt_ttl_hours),
        )
        accounts = StaticAccountChecker(settings.login_email, settings.login_password)
        if not settings.login_email or not settings.login_password:
            logger.warning("LOGIN_EMAIL/LOGIN_PASSWORD not set; /api/login will reject everyone")
        return AuthService(codec, issuer=codec, accounts=accounts)

    firebase_app = initialize_firebase_app(FirebaseServiceAccount.from_env())
    return AuthService(FirebaseTokenVerifier(firebase_app))


def build_container(settings: ApiSettings) -> ServiceContainer:
    """Create the process-wide clients once. Any failure here stops the process."""
    try:
        auth = build_auth_service(settings)
        reader = GoogleSheetsReader.from_config(GoogleSheetsConfig.from_env())
    except Exception:
        logger.exception("Credential initialization failed (auth_mode=%s)", settings.auth_mode)
        raise SystemExit(1)
    sheets = TradingSheetsService(reader, settings.trade_layout, settings.pnl_layout)
    return ServiceContainer(settings=settings, auth=auth, sheets=sheets)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_settings(container: ServiceContainer = Depends(get_container)) -> ApiSettings:
    return container.settings


def get_auth_service(container: ServiceContainer = Depends(get_container)) -> AuthService:
    return container.auth


def get_sheets_service(
    container: ServiceContainer = Depends(get_container),
) -> TradingSheetsService:
    return container.sheets


async def require_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> AuthClaims:
    """Bearer-token gate for protected routes; stores claims on ``request.state.user``."""
    try:
        claims = await auth.authenticate(request.headers.get("Authorization"))
    except MissingTokenError:
        raise ApiError(401, "No token provided")
    except InvalidTokenError:
        raise ApiError(403, "Invalid token")
    request.state.user = claims
    return claims
