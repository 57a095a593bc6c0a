import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from tradeboard.api.deps import get_auth_service, require_user
from tradeboard.api.schemas import LoginRequest, LoginResponse, VerifyTokenResponse
from tradeboard.core.auth.errors import InvalidCredentialsError, LoginUnavailableError
from tradeboard.core.auth.models import AuthClaims
from tradeboard.core.auth.service import AuthService

router = APIRouter(prefix="/api", tags=["auth"])
login_router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


@router.get("/verify-token", response_model=VerifyTokenResponse)
def verify_token(user: AuthClaims = Depends(require_user)) -> VerifyTokenResponse:
    return VerifyTokenResponse(success=True, user=user)


@login_router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials"}},
)
def login(
    payload: Optional[LoginRequest] = Body(None),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Exchange the configured development account for a signed token.
    Mounted only when AUTH_MODE=jwt.
    """
    try:
        payload = payload or LoginRequest()
        issued = auth.login(payload.email, payload.password)
    except (InvalidCredentialsError, LoginUnavailableError):
        return JSONResponse(
            status_code=401,
            content={"success": False, "error": "Invalid credentials"},
        )
    return LoginResponse(success=True, token=issued.token, message="Login successful")
