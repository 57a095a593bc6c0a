from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import google_auth_httplib2
import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from tradeboard.core.sheets.errors import SheetUnavailableError
from tradeboard.core.sheets.models import RangeQuery, SheetValues

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]


def decode_service_account_json(raw: str) -> dict[str, Any]:
    """Accept the service-account JSON either verbatim or base64-encoded."""
    text = raw.strip()
    if not text.startswith("{"):
        try:
            decoded = base64.b64decode(text, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValueError("GOOGLE_CREDENTIALS is neither JSON nor base64 JSON") from exc
        text = decoded.strip()
    try:
        info = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"GOOGLE_CREDENTIALS is not valid JSON: {exc.msg}") from exc
    if not isinstance(info, dict):
        raise ValueError("GOOGLE_CREDENTIALS must be a JSON object")
    return info


@dataclass(frozen=True)
class GoogleSheetsConfig:
    spreadsheet_id: str
    credentials_info: dict[str, Any]
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "GoogleSheetsConfig":
        spreadsheet_id = os.getenv("GOOGLE_SHEET_ID")
        if not spreadsheet_id:
            raise RuntimeError("GOOGLE_SHEET_ID is not set")
        raw_credentials = os.getenv("GOOGLE_CREDENTIALS")
        if not raw_credentials:
            raise RuntimeError("GOOGLE_CREDENTIALS is not set")
        return cls(
            spreadsheet_id=spreadsheet_id,
            credentials_info=decode_service_account_json(raw_credentials),
            timeout=float(os.getenv("SHEETS_TIMEOUT_SECONDS", "10")),
        )


class GoogleSheetsReader:
    """Read-only ``spreadsheets.values.get`` client.

    The discovery service object is built once. Each call runs in a worker
    thread with its own authorized ``httplib2.Http`` because httplib2
    connections are not safe to share between threads; the per-call Http also
    carries the request timeout.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        service: Any,
        *,
        http_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._service = service
        self._http_factory = http_factory

    @classmethod
    def from_config(cls, config: GoogleSheetsConfig) -> "GoogleSheetsReader":
        creds = service_account.Credentials.from_service_account_info(
            config.credentials_info,
            scopes=SCOPES,
        )
        service = build("sheets", "v4", credentials=creds, cache_discovery=False)

        def _http() -> google_auth_httplib2.AuthorizedHttp:
            return google_auth_httplib2.AuthorizedHttp(
                creds,
                http=httplib2.Http(timeout=config.timeout),
            )

        logger.info(
            "Google Sheets client ready spreadsheet=%s timeout=%ss",
            config.spreadsheet_id,
            config.timeout,
        )
        return cls(config.spreadsheet_id, service, http_factory=_http)

    async def read(self, query: RangeQuery) -> SheetValues:
        range_a1 = query.a1
        request = (
            self._service.spreadsheets()
            .values()
            .get(spreadsheetId=self._spreadsheet_id, range=range_a1)
        )
        http = self._http_factory() if self._http_factory else None
        try:
            resp = await asyncio.to_thread(request.execute, http=http)
        except HttpError as exc:
            status = getattr(exc.resp, "status", "?")
            logger.error("Sheets read failed range=%s status=%s", range_a1, status)
            raise SheetUnavailableError(range_a1, f"HTTP {status}: {exc}") from exc
        except (httplib2.HttpLib2Error, GoogleAuthError, OSError) as exc:
            logger.error("Sheets read failed range=%s error=%s", range_a1, exc)
            raise SheetUnavailableError(range_a1, str(exc) or type(exc).__name__) from exc

        rows = [[_cell_text(value) for value in row] for row in resp.get("values", []) or []]
        return SheetValues(range=resp.get("range", range_a1), rows=rows)

    async def read_many(self, queries: Sequence[RangeQuery]) -> list[SheetValues]:
        return list(await asyncio.gather(*(self.read(query) for query in queries)))


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
