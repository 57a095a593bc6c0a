from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from tradeboard.core.sheets.layout import TableLayout, parse_columns
from tradeboard.core.sheets.mappers import PNL_FIELDS, TRADE_FIELDS

AUTH_MODES = ("firebase", "jwt")

DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]
DEFAULT_TRADE_SHEET = "Trade-History"
DEFAULT_TRADE_COLUMNS = "date=A,name=B,tradeType=C,pnl=D"
DEFAULT_PNL_SHEET = "Trade-History"
DEFAULT_PNL_COLUMNS = "date=B,pnl=E"


class ConfigError(RuntimeError):
    pass


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def build_layout(sheet: str, spec: str, fields: tuple[str, ...], env_name: str) -> TableLayout:
    try:
        return TableLayout(sheet=sheet, columns=parse_columns(spec, fields))
    except ValueError as exc:
        raise ConfigError(f"{env_name}: {exc}") from exc


@dataclass(frozen=True)
class ApiSettings:
    auth_mode: str = "firebase"
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    jwt_secret: Optional[str] = None
    jwt_ttl_hours: float = 24.0
    login_email: Optional[str] = None
    login_password: Optional[str] = None
    trade_layout: TableLayout = field(
        default_factory=lambda: build_layout(
            DEFAULT_TRADE_SHEET, DEFAULT_TRADE_COLUMNS, TRADE_FIELDS, "TRADE_HISTORY_COLUMNS"
        )
    )
    pnl_layout: TableLayout = field(
        default_factory=lambda: build_layout(
            DEFAULT_PNL_SHEET, DEFAULT_PNL_COLUMNS, PNL_FIELDS, "PNL_COLUMNS"
        )
    )
    app_env: str = "production"
    expose_error_details: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.auth_mode not in AUTH_MODES:
            raise ConfigError(
                f"AUTH_MODE must be one of {', '.join(AUTH_MODES)}, got {self.auth_mode!r}"
            )
        if self.auth_mode == "jwt" and not self.jwt_secret:
            raise ConfigError("JWT_SECRET is required when AUTH_MODE=jwt")
        if self.jwt_ttl_hours <= 0:
            raise ConfigError("JWT_TTL_HOURS must be positive")

    @property
    def debug(self) -> bool:
        return self.app_env == "development"

    @property
    def show_error_details(self) -> bool:
        return self.expose_error_details or self.debug

    @classmethod
    def from_env(cls) -> "ApiSettings":
        try:
            port = int(os.getenv("PORT", "3001"))
            jwt_ttl_hours = float(os.getenv("JWT_TTL_HOURS", "24"))
        except ValueError as exc:
            raise ConfigError(f"Invalid numeric setting: {exc}") from exc
        return cls(
            auth_mode=os.getenv("AUTH_MODE", "firebase").strip().lower(),
            cors_origins=_origins(os.getenv("ALLOWED_ORIGINS")),
            jwt_secret=os.getenv("JWT_SECRET") or None,
            jwt_ttl_hours=jwt_ttl_hours,
            login_email=os.getenv("LOGIN_EMAIL") or None,
            login_password=os.getenv("LOGIN_PASSWORD") or None,
            trade_layout=build_layout(
                os.getenv("TRADE_HISTORY_SHEET", DEFAULT_TRADE_SHEET),
                os.getenv("TRADE_HISTORY_COLUMNS", DEFAULT_TRADE_COLUMNS),
                TRADE_FIELDS,
                "TRADE_HISTORY_COLUMNS",
            ),
            pnl_layout=build_layout(
                os.getenv("PNL_SHEET", DEFAULT_PNL_SHEET),
                os.getenv("PNL_COLUMNS", DEFAULT_PNL_COLUMNS),
                PNL_FIELDS,
                "PNL_COLUMNS",
            ),
            app_env=os.getenv("APP_ENV", "production").strip().lower(),
            expose_error_details=_flag("EXPOSE_ERROR_DETAILS"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=port,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
