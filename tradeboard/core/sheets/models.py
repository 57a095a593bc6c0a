from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

RawRow = list[str]

_PLAIN_SHEET_NAME = re.compile(r"^[A-Za-z0-9_\-]+$")


@dataclass(frozen=True)
class RangeQuery:
    sheet: str
    cells: str

    @property
    def a1(self) -> str:
        """Render the range as an A1 string, quoting sheet names that need it."""
        if _PLAIN_SHEET_NAME.match(self.sheet):
            return f"{self.sheet}!{self.cells}"
        escaped = self.sheet.replace("'", "''")
        return f"'{escaped}'!{self.cells}"


@dataclass(frozen=True)
class SheetValues:
    range: str
    rows: list[RawRow] = field(default_factory=list)

    @property
    def first_row(self) -> Optional[RawRow]:
        return self.rows[0] if self.rows else None


@dataclass(frozen=True)
class PerformanceEntry:
    title: str
    value: str
    change: str


@dataclass(frozen=True)
class TradeRecord:
    date: str
    name: str
    trade_type: str
    pnl: str


@dataclass(frozen=True)
class PnlPoint:
    date: str
    pnl: Optional[float]
