from __future__ import annotations

import logging
from typing import Optional

from tradeboard.core.sheets.errors import InvalidSheetNameError, NoSheetDataError
from tradeboard.core.sheets.layout import TableLayout
from tradeboard.core.sheets.mappers import map_performance, map_pnl_series, map_trade_history
from tradeboard.core.sheets.models import (
    PerformanceEntry,
    PnlPoint,
    RangeQuery,
    SheetValues,
    TradeRecord,
)
from tradeboard.core.sheets.ports import SheetReader

logger = logging.getLogger(__name__)

CONNECTIVITY_QUERY = RangeQuery("Trade-History", "A1:A1")
PERFORMANCE_VALUES_QUERY = RangeQuery("Trade-History", "H1:N1")
PERFORMANCE_CHANGES_QUERY = RangeQuery("Trade-History", "G2:M2")


class TradingSheetsService:
    def __init__(
        self,
        reader: SheetReader,
        trade_layout: TableLayout,
        pnl_layout: TableLayout,
    ) -> None:
        self._reader = reader
        self._trade_layout = trade_layout
        self._pnl_layout = pnl_layout

    async def check_connection(self) -> SheetValues:
        return await self._reader.read(CONNECTIVITY_QUERY)

    async def performance_summary(self) -> list[PerformanceEntry]:
        values, changes = await self._reader.read_many(
            [PERFORMANCE_VALUES_QUERY, PERFORMANCE_CHANGES_QUERY]
        )
        for result in (values, changes):
            if result.first_row is None:
                raise NoSheetDataError(result.range)
        return map_performance(values.first_row or [], changes.first_row or [])

    async def trade_history(self) -> list[TradeRecord]:
        layout = self._trade_layout
        values = await self._reader.read(layout.query())
        columns, rows = layout.resolve(values.rows)
        records = map_trade_history(rows, columns)
        logger.info(
            "Trade history sheet=%s rows_read=%s records=%s",
            layout.sheet,
            len(values.rows),
            len(records),
        )
        return records

    async def pnl_series(self, sheet: Optional[str] = None) -> list[PnlPoint]:
        layout = self._pnl_layout
        target = _validate_sheet_name(sheet) if sheet and sheet.strip() else layout.sheet
        values = await self._reader.read(layout.query(target))
        columns, rows = layout.resolve(values.rows, sheet=target)
        points = map_pnl_series(rows, columns)
        logger.info(
            "P&L series sheet=%s rows_read=%s points=%s",
            target,
            len(values.rows),
            len(points),
        )
        return points


def _validate_sheet_name(sheet: str) -> str:
    name = sheet.strip()
    if not name or "!" in name:
        raise InvalidSheetNameError(f"Invalid sheet name: {sheet!r}")
    return name
