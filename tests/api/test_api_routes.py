from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Sequence

import jwt
import pytest
from fastapi.testclient import TestClient

from tradeboard.adapters.auth.jwt_tokens import JwtTokenCodec, StaticAccountChecker
from tradeboard.api.deps import ServiceContainer
from tradeboard.api.main import create_app
from tradeboard.api.settings import ApiSettings
from tradeboard.core.auth.errors import InvalidTokenError
from tradeboard.core.auth.models import AuthClaims
from tradeboard.core.auth.service import AuthService
from tradeboard.core.sheets.errors import SheetUnavailableError
from tradeboard.core.sheets.layout import TableLayout, parse_columns
from tradeboard.core.sheets.mappers import TRADE_FIELDS
from tradeboard.core.sheets.models import RangeQuery, SheetValues
from tradeboard.core.sheets.service import TradingSheetsService

_SECRET = "api-test-secret-with-enough-length-xx"
_GOOD = {"Authorization": "Bearer good-token"}

_PROTECTED = [
    "/api/verify-token",
    "/api/test-sheets",
    "/api/performance-data",
    "/api/trade-history",
    "/api/pnl-data",
]


class _FakeReader:
    def __init__(
        self,
        rows_by_range: dict[str, list[list[str]]] | None = None,
        failing: dict[str, Exception] | None = None,
    ) -> None:
        self._rows_by_range = rows_by_range or {}
        self._failing = failing or {}
        self.calls: list[str] = []

    async def read(self, query: RangeQuery) -> SheetValues:
        self.calls.append(query.a1)
        if query.a1 in self._failing:
            raise self._failing[query.a1]
        return SheetValues(range=query.a1, rows=self._rows_by_range.get(query.a1, []))

    async def read_many(self, queries: Sequence[RangeQuery]) -> list[SheetValues]:
        return list(await asyncio.gather(*(self.read(query) for query in queries)))


class _FakeVerifier:
    async def verify(self, token: str) -> AuthClaims:
        if token != "good-token":
            raise InvalidTokenError("rejected")
        return {"uid": "u1", "email": "trader@example.com"}


def _client(
    reader: _FakeReader | None = None,
    *,
    settings: ApiSettings | None = None,
    auth: AuthService | None = None,
    raise_server_exceptions: bool = True,
) -> TestClient:
    settings = settings or ApiSettings()
    reader = reader or _FakeReader()
    container = ServiceContainer(
        settings=settings,
        auth=auth or AuthService(_FakeVerifier()),
        sheets=TradingSheetsService(reader, settings.trade_layout, settings.pnl_layout),
    )
    return TestClient(create_app(container), raise_server_exceptions=raise_server_exceptions)


def _jwt_client(reader: _FakeReader | None = None) -> TestClient:
    settings = ApiSettings(
        auth_mode="jwt",
        jwt_secret=_SECRET,
        login_email="trader@example.com",
        login_password="hunter2",
    )
    codec = JwtTokenCodec(_SECRET)
    auth = AuthService(
        codec,
        issuer=codec,
        accounts=StaticAccountChecker(settings.login_email, settings.login_password),
    )
    return _client(reader, settings=settings, auth=auth)


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("/", "Server is running!"),
        ("/test", "Server is running and accessible!"),
    ],
)
def test_liveness_routes_need_no_token(path: str, message: str) -> None:
    resp = _client().get(path)

    assert resp.status_code == 200
    assert resp.json() == {"message": message}


def test_health() -> None:
    assert _client().get("/health").json() == {"status": "ok"}


@pytest.mark.parametrize("path", _PROTECTED)
def test_protected_routes_reject_missing_token_before_reading(path: str) -> None:
    reader = _FakeReader()

    resp = _client(reader).get(path)

    assert resp.status_code == 401
    assert resp.json() == {"error": "No token provided"}
    assert reader.calls == []


@pytest.mark.parametrize("path", _PROTECTED)
def test_protected_routes_reject_invalid_token_before_reading(path: str) -> None:
    reader = _FakeReader()

    resp = _client(reader).get(path, headers={"Authorization": "Bearer forged"})

    assert resp.status_code == 403
    assert resp.json() == {"error": "Invalid token"}
    assert reader.calls == []


def test_verify_token_echoes_claims() -> None:
    resp = _client().get("/api/verify-token", headers=_GOOD)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "user": {"uid": "u1", "email": "trader@example.com"}}


def test_trade_history_example_most_recent_first() -> None:
    reader = _FakeReader(
        {
            "Trade-History!A2:D": [
                ["2024-01-01", "BTC", "long", "150.5"],
                ["2024-01-02", "ETH", "short", "-20"],
            ]
        }
    )

    resp = _client(reader).get("/api/trade-history", headers=_GOOD)

    assert resp.status_code == 200
    assert resp.json() == [
        {"date": "2024-01-02", "name": "ETH", "tradeType": "short", "pnl": "-20"},
        {"date": "2024-01-01", "name": "BTC", "tradeType": "long", "pnl": "150.5"},
    ]


@pytest.mark.parametrize("path", ["/api/trade-history", "/api/pnl-data"])
def test_list_routes_return_empty_list_for_empty_sheet(path: str) -> None:
    resp = _client(_FakeReader()).get(path, headers=_GOOD)

    assert resp.status_code == 200
    assert resp.json() == []


def test_pnl_data_defaults_bad_numbers_to_null_and_keeps_order() -> None:
    reader = _FakeReader(
        {
            "Trade-History!A2:E": [
                ["1", "2024-01-01", "BTC", "long", "10"],
                ["2", "2024-01-02", "ETH", "short", "n/a"],
                ["3", "2024-01-03", "SOL", "long"],
            ]
        }
    )

    resp = _client(reader).get("/api/pnl-data", headers=_GOOD)

    assert resp.json() == [
        {"date": "2024-01-01", "pnl": 10.0},
        {"date": "2024-01-02", "pnl": None},
        {"date": "2024-01-03", "pnl": None},
    ]


def test_pnl_data_reads_requested_sheet() -> None:
    reader = _FakeReader({"'Q1 Trades'!A2:E": [["1", "2024-03-01", "", "", "-4"]]})

    resp = _client(reader).get("/api/pnl-data", params={"sheet": "Q1 Trades"}, headers=_GOOD)

    assert resp.json() == [{"date": "2024-03-01", "pnl": -4.0}]
    assert reader.calls == ["'Q1 Trades'!A2:E"]


def test_pnl_data_rejects_range_injection() -> None:
    reader = _FakeReader()

    resp = _client(reader).get("/api/pnl-data", params={"sheet": "X!A1:Z"}, headers=_GOOD)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid sheet name"
    assert reader.calls == []


@pytest.mark.parametrize("sheet", ["", "  "])
def test_pnl_data_blank_sheet_reads_default(sheet: str) -> None:
    reader = _FakeReader({"Trade-History!A2:E": [["1", "2024-01-01", "", "", "3"]]})

    resp = _client(reader).get("/api/pnl-data", params={"sheet": sheet}, headers=_GOOD)

    assert resp.status_code == 200
    assert resp.json() == [{"date": "2024-01-01", "pnl": 3.0}]
    assert reader.calls == ["Trade-History!A2:E"]


def test_pnl_data_upstream_failure_hides_details_by_default() -> None:
    reader = _FakeReader(failing={"Trade-History!A2:E": SheetUnavailableError("Trade-History!A2:E", "quota")})

    resp = _client(reader).get("/api/pnl-data", headers=_GOOD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch PNL data"}


def test_pnl_data_upstream_failure_exposes_details_when_enabled() -> None:
    reader = _FakeReader(failing={"Trade-History!A2:E": SheetUnavailableError("Trade-History!A2:E", "quota")})

    resp = _client(reader, settings=ApiSettings(expose_error_details=True)).get(
        "/api/pnl-data",
        headers=_GOOD,
    )

    assert resp.status_code == 500
    assert "quota" in resp.json()["details"]


def test_performance_data_returns_four_entries() -> None:
    reader = _FakeReader(
        {
            "Trade-History!H1:N1": [["120", "", "-40", "", "800", "", "5000"]],
            "Trade-History!G2:M2": [["2%", "", "", "", "5%"]],
        }
    )

    resp = _client(reader).get("/api/performance-data", headers=_GOOD)

    assert resp.status_code == 200
    assert resp.json() == [
        {"title": "Weekly P&L", "value": "120", "change": "2%"},
        {"title": "Last Week P&L", "value": "-40", "change": "0"},
        {"title": "Monthly P&L", "value": "800", "change": "5%"},
        {"title": "Yearly P&L", "value": "5000", "change": "0"},
    ]


def test_performance_data_404_when_a_range_is_empty() -> None:
    reader = _FakeReader({"Trade-History!H1:N1": [["120"]]})

    resp = _client(reader).get("/api/performance-data", headers=_GOOD)

    assert resp.status_code == 404
    assert resp.json() == {"error": "No performance data found"}


def test_performance_data_500_when_either_read_fails() -> None:
    reader = _FakeReader(
        {"Trade-History!H1:N1": [["120"]]},
        failing={"Trade-History!G2:M2": SheetUnavailableError("Trade-History!G2:M2", "timeout")},
    )

    resp = _client(reader).get("/api/performance-data", headers=_GOOD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch performance data"}


def test_test_sheets_round_trips_probe_cell() -> None:
    reader = _FakeReader({"Trade-History!A1:A1": [["Date"]]})

    resp = _client(reader).get("/api/test-sheets", headers=_GOOD)

    assert resp.json() == {
        "success": True,
        "data": {"range": "Trade-History!A1:A1", "values": [["Date"]]},
    }


def test_test_sheets_failure() -> None:
    reader = _FakeReader(failing={"Trade-History!A1:A1": SheetUnavailableError("Trade-History!A1:A1", "403")})

    resp = _client(reader).get("/api/test-sheets", headers=_GOOD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to connect to Google Sheets"}


def test_login_issues_24h_token_for_configured_account() -> None:
    client = _jwt_client()

    resp = client.post("/api/login", json={"email": "trader@example.com", "password": "hunter2"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    claims = jwt.decode(body["token"], _SECRET, algorithms=["HS256"])
    assert claims["email"] == "trader@example.com"
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60

    verify = client.get("/api/verify-token", headers={"Authorization": f"Bearer {body['token']}"})
    assert verify.json()["user"]["email"] == "trader@example.com"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "trader@example.com", "password": "wrong"},
        {"email": "someone@example.com", "password": "hunter2"},
        {"email": "trader@example.com"},
        {},
    ],
)
def test_login_rejects_other_credentials(payload: dict) -> None:
    resp = _jwt_client().post("/api/login", json=payload)

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid credentials"}


def test_login_not_mounted_in_firebase_mode() -> None:
    resp = _client().post("/api/login", json={"email": "a", "password": "b"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Route not found"}


def test_unknown_route_returns_json_404() -> None:
    resp = _client().get("/api/nope")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Route not found"}


def test_unhandled_error_is_generic_outside_development() -> None:
    reader = _FakeReader(failing={"Trade-History!A2:D": RuntimeError("secret internals")})
    client = _client(reader, raise_server_exceptions=False)

    resp = client.get("/api/trade-history", headers=_GOOD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Something went wrong!"}


def test_unhandled_error_includes_message_in_development() -> None:
    reader = _FakeReader(failing={"Trade-History!A2:D": RuntimeError("secret internals")})
    client = _client(
        reader,
        settings=ApiSettings(app_env="development"),
        raise_server_exceptions=False,
    )

    resp = client.get("/api/trade-history", headers=_GOOD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Something went wrong!", "message": "secret internals"}


def test_cors_preflight_allows_configured_origin() -> None:
    client = _client(settings=ApiSettings(cors_origins=["https://dash.example.com"]))

    resp = client.options(
        "/api/trade-history",
        headers={
            "Origin": "https://dash.example.com",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "https://dash.example.com"


@pytest.mark.parametrize(
    "body",
    [
        {"email": None, "password": None},
        {"email": "trader@example.com", "password": 123},
        {"email": ["trader@example.com"], "password": "hunter2"},
    ],
)
def test_login_rejects_non_string_credentials(body: dict) -> None:
    resp = _jwt_client().post("/api/login", json=body)

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid credentials"}


def test_login_without_body_is_rejected_as_invalid_credentials() -> None:
    resp = _jwt_client().post("/api/login")

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid credentials"}


def test_expired_login_token_is_forbidden() -> None:
    stale = JwtTokenCodec(
        _SECRET,
        clock=lambda: datetime.now(timezone.utc) - timedelta(days=2),
    ).issue("trader@example.com")

    resp = _jwt_client().get(
        "/api/verify-token",
        headers={"Authorization": f"Bearer {stale.token}"},
    )

    assert resp.status_code == 403
    assert resp.json() == {"error": "Invalid token"}


@pytest.mark.parametrize(
    ("path", "error"),
    [
        ("/api/trade-history", "Failed to load trade history"),
        ("/api/pnl-data", "Failed to fetch PNL data"),
    ],
)
def test_header_layout_missing_title_is_500(path: str, error: str) -> None:
    settings = ApiSettings(
        trade_layout=TableLayout(
            "Trade-History",
            parse_columns("date=Date,name=Symbol,tradeType=Side,pnl=PnL", TRADE_FIELDS),
        ),
        pnl_layout=TableLayout("Trade-History", parse_columns("date=Date,pnl=PnL", ("date", "pnl"))),
    )
    reader = _FakeReader({"Trade-History!A1:ZZ": [["Date", "Symbol"], ["2024-01-01", "BTC"]]})

    resp = _client(reader, settings=settings).get(path, headers=_GOOD)

    assert resp.status_code == 500
    assert resp.json() == {"error": error}


def test_unhandled_error_keeps_cors_headers() -> None:
    reader = _FakeReader(failing={"Trade-History!A2:D": RuntimeError("secret internals")})
    client = _client(
        reader,
        settings=ApiSettings(cors_origins=["https://dash.example.com"]),
        raise_server_exceptions=False,
    )

    resp = client.get(
        "/api/trade-history",
        headers={**_GOOD, "Origin": "https://dash.example.com"},
    )

    assert resp.status_code == 500
    assert resp.headers["access-control-allow-origin"] == "https://dash.example.com"
    assert resp.json() == {"error": "Something went wrong!"}
