import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from tradeboard.api.deps import get_settings, get_sheets_service, require_user
from tradeboard.api.errors import ApiError
from tradeboard.api.schemas import (
    PerformanceEntryOut,
    PnlPointOut,
    SheetProbeData,
    SheetProbeResponse,
    TradeRecordOut,
)
from tradeboard.api.settings import ApiSettings
from tradeboard.core.sheets.errors import (
    InvalidSheetNameError,
    NoSheetDataError,
    SheetLayoutError,
    SheetUnavailableError,
)
from tradeboard.core.sheets.service import TradingSheetsService

router = APIRouter(prefix="/api", tags=["sheets"], dependencies=[Depends(require_user)])
logger = logging.getLogger(__name__)


def _upstream_error(settings: ApiSettings, message: str, exc: Exception) -> ApiError:
    return ApiError(500, message, details=str(exc) if settings.show_error_details else None)


@router.get("/test-sheets", response_model=SheetProbeResponse)
async def test_sheets(
    sheets: TradingSheetsService = Depends(get_sheets_service),
    settings: ApiSettings = Depends(get_settings),
) -> SheetProbeResponse:
    try:
        values = await sheets.check_connection()
    except SheetUnavailableError as exc:
        logger.error("Google Sheets test error: %s", exc)
        raise _upstream_error(settings, "Failed to connect to Google Sheets", exc)
    return SheetProbeResponse(
        success=True,
        data=SheetProbeData(range=values.range, values=values.rows),
    )


@router.get("/performance-data", response_model=list[PerformanceEntryOut])
async def performance_data(
    sheets: TradingSheetsService = Depends(get_sheets_service),
    settings: ApiSettings = Depends(get_settings),
) -> list[PerformanceEntryOut]:
    """Weekly, last-week, monthly and yearly P&L with their changes."""
    try:
        entries = await sheets.performance_summary()
    except NoSheetDataError as exc:
        logger.warning("Performance data empty: %s", exc)
        raise ApiError(404, "No performance data found")
    except SheetUnavailableError as exc:
        logger.error("Performance data error: %s", exc)
        raise _upstream_error(settings, "Failed to fetch performance data", exc)
    return [PerformanceEntryOut.from_entry(entry) for entry in entries]


@router.get("/trade-history", response_model=list[TradeRecordOut])
async def trade_history(
    sheets: TradingSheetsService = Depends(get_sheets_service),
    settings: ApiSettings = Depends(get_settings),
) -> list[TradeRecordOut]:
    try:
        records = await sheets.trade_history()
    except (SheetUnavailableError, SheetLayoutError) as exc:
        logger.error("Failed to fetch trade history: %s", exc)
        raise _upstream_error(settings, "Failed to load trade history", exc)
    return [TradeRecordOut.from_record(record) for record in records]


@router.get("/pnl-data", response_model=list[PnlPointOut])
async def pnl_data(
    sheet: Optional[str] = Query(None, description="Sheet to read the P&L series from"),
    sheets: TradingSheetsService = Depends(get_sheets_service),
    settings: ApiSettings = Depends(get_settings),
) -> list[PnlPointOut]:
    try:
        points = await sheets.pnl_series(sheet)
    except InvalidSheetNameError as exc:
        raise ApiError(400, "Invalid sheet name", details=str(exc))
    except (SheetUnavailableError, SheetLayoutError) as exc:
        logger.error("Error fetching PNL data sheet=%s: %s", sheet, exc)
        raise _upstream_error(settings, "Failed to fetch PNL data", exc)
    return [PnlPointOut.from_point(point) for point in points]
