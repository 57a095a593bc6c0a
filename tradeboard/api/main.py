import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradeboard.api.deps import ServiceContainer, build_container
from tradeboard.api.errors import install_error_handlers
from tradeboard.api.routes import auth, sheets
from tradeboard.api.schemas import HealthResponse, MessageResponse
from tradeboard.api.settings import ApiSettings, ConfigError

logger = logging.getLogger(__name__)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    if container is None:
        load_dotenv()
        try:
            env_settings = ApiSettings.from_env()
        except ConfigError as exc:
            logger.error("Invalid configuration: %s", exc)
            raise SystemExit(1)
        container = build_container(env_settings)
    settings = container.settings

    app = FastAPI(title="tradeboard API", debug=False)
    app.state.container = container

    install_error_handlers(app, debug=settings.debug)

    # Browser clients send the Firebase/JWT token in the Authorization header.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Authorization"],
    )

    @app.get("/", tags=["health"], response_model=MessageResponse)
    def root() -> MessageResponse:
        return MessageResponse(message="Server is running!")

    @app.get("/test", tags=["health"], response_model=MessageResponse)
    def test() -> MessageResponse:
        return MessageResponse(message="Server is running and accessible!")

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    app.include_router(auth.router)
    if container.auth.login_enabled:
        app.include_router(auth.login_router)
    app.include_router(sheets.router)

    logger.info(
        "API ready auth_mode=%s login=%s origins=%s",
        settings.auth_mode,
        container.auth.login_enabled,
        ",".join(settings.cors_origins),
    )
    return app
