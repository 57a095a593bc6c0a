from __future__ import annotations

import math
import re
from typing import Optional, Sequence

from tradeboard.core.sheets.layout import ColumnMap
from tradeboard.core.sheets.models import PerformanceEntry, PnlPoint, RawRow, TradeRecord

# Title -> cell offset inside both the values row (H1:N1) and the changes row (G2:M2).
PERFORMANCE_OFFSETS: tuple[tuple[str, int], ...] = (
    ("Weekly P&L", 0),
    ("Last Week P&L", 2),
    ("Monthly P&L", 4),
    ("Yearly P&L", 6),
)

PERFORMANCE_DEFAULT = "0"

TRADE_FIELDS = ("date", "name", "tradeType", "pnl")
PNL_FIELDS = ("date", "pnl")

_DECIMAL = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def cell(row: RawRow, index: Optional[int]) -> str:
    """Return the stripped cell text, or "" past the end of a trimmed row."""
    if index is None or index < 0 or index >= len(row):
        return ""
    value = row[index]
    if value is None:
        return ""
    return str(value).strip()


def parse_number(raw: object) -> Optional[float]:
    """Parse a sheet cell as a float; ``None`` when it is not a plain number.

    Accepts an optional sign, then accounting parentheses, then a currency
    sign: ``-20``, ``(20)``, ``-(20)``, ``$99``, ``-$12.5`` and ``1,234.50``.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = float(raw)
        return value if math.isfinite(value) else None

    text = str(raw).strip().replace(",", "").replace(" ", "")
    if not text or "_" in text:
        return None
    negative = False
    if text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]
    if len(text) >= 2 and text[0] == "(" and text[-1] == ")":
        negative = True
        text = text[1:-1]
    if text.startswith("$"):
        text = text[1:]
    if not _DECIMAL.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return -value if negative else value


def map_performance(values_row: RawRow, changes_row: RawRow) -> list[PerformanceEntry]:
    entries: list[PerformanceEntry] = []
    for title, offset in PERFORMANCE_OFFSETS:
        entries.append(
            PerformanceEntry(
                title=title,
                value=cell(values_row, offset) or PERFORMANCE_DEFAULT,
                change=cell(changes_row, offset) or PERFORMANCE_DEFAULT,
            )
        )
    return entries


def map_trade_history(rows: Sequence[RawRow], columns: ColumnMap) -> list[TradeRecord]:
    """Most recent first. Rows without a date, a symbol or a numeric P&L are dropped."""
    records: list[TradeRecord] = []
    for row in rows:
        date = cell(row, columns.get("date"))
        name = cell(row, columns.get("name"))
        pnl = cell(row, columns.get("pnl"))
        if not date or not name:
            continue
        if parse_number(pnl) is None:
            continue
        records.append(
            TradeRecord(
                date=date,
                name=name,
                trade_type=cell(row, columns.get("tradeType")),
                pnl=pnl,
            )
        )
    records.reverse()
    return records


def map_pnl_series(rows: Sequence[RawRow], columns: ColumnMap) -> list[PnlPoint]:
    """Source order. A missing or non-numeric P&L becomes None, not 0."""
    points: list[PnlPoint] = []
    for row in rows:
        date = cell(row, columns.get("date"))
        if not date:
            continue
        points.append(PnlPoint(date=date, pnl=parse_number(cell(row, columns.get("pnl")))))
    return points
