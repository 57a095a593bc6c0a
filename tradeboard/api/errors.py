from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """HTTP error rendered as ``{"error": ..., "details": ...}``."""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None) -> None:
        super().__init__(status_code=status_code, detail=error)
        self.details = details


def error_body(error: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


def install_error_handlers(app: FastAPI, *, debug: bool) -> None:
    """Register the JSON error envelope.

    Call before adding CORSMiddleware: the unhandled-error middleware has to
    sit inside CORS so browsers can read the 500 body.
    """

    def _unhandled_response(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error path=%s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "Something went wrong!",
                message=str(exc) if debug else None,
            ),
        )

    @app.middleware("http")
    async def _catch_unhandled(request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return _unhandled_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = str(exc.detail)
        if exc.status_code == 404 and message == "Not Found":
            message = "Route not found"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message, details=getattr(exc, "details", None)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected request path=%s errors=%s", request.url.path, len(exc.errors()))
        return JSONResponse(status_code=400, content=error_body("Invalid request"))

    # Errors raised by middleware outside the catch-all above.
    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        return _unhandled_response(request, exc)
