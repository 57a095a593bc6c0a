"""Trading spreadsheet domain types and services."""

from tradeboard.core.sheets.errors import (
    InvalidSheetNameError,
    NoSheetDataError,
    SheetError,
    SheetLayoutError,
    SheetUnavailableError,
)
from tradeboard.core.sheets.layout import ColumnSpec, TableLayout, parse_columns
from tradeboard.core.sheets.models import (
    PerformanceEntry,
    PnlPoint,
    RangeQuery,
    SheetValues,
    TradeRecord,
)
from tradeboard.core.sheets.ports import SheetReader
from tradeboard.core.sheets.service import TradingSheetsService

__all__ = [
    "ColumnSpec",
    "InvalidSheetNameError",
    "NoSheetDataError",
    "PerformanceEntry",
    "PnlPoint",
    "RangeQuery",
    "SheetError",
    "SheetLayoutError",
    "SheetReader",
    "SheetUnavailableError",
    "SheetValues",
    "TableLayout",
    "TradeRecord",
    "TradingSheetsService",
    "parse_columns",
]
