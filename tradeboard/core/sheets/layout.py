"""Column layout for list-shaped sheet reads.

A layout names the fields an endpoint needs and where each one lives. A
field is located either by column letter (``pnl=E``) or by the title in the
sheet's header row (``pnl=Net PnL``). Titles that look like column letters
can be forced with double quotes (``pnl="PNL"``). When a layout already reads
the header row, an unquoted letter that matches a title resolves to that
title. Header lookups make the endpoint robust to column reordering; letter
lookups read from row 2 and trust the sheet to keep its shape.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from tradeboard.core.sheets.errors import SheetLayoutError
from tradeboard.core.sheets.models import RangeQuery, RawRow

logger = logging.getLogger(__name__)

ColumnMap = dict[str, int]

# Widest range requested when the header row has to be scanned.
HEADER_SCAN_LAST_COLUMN = "ZZ"

_COLUMN_LETTERS = re.compile(r"^[A-Z]{1,2}$")


def column_to_index(letters: str) -> int:
    index = 0
    for char in letters.upper():
        if not "A" <= char <= "Z":
            raise ValueError(f"Invalid column letter: {letters!r}")
        index = index * 26 + (ord(char) - ord("A") + 1)
    if index == 0:
        raise ValueError("Column letter is empty")
    return index - 1


def index_to_column(index: int) -> str:
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


@dataclass(frozen=True)
class ColumnSpec:
    field: str
    letter: Optional[str] = None
    header: Optional[str] = None

    @property
    def by_header(self) -> bool:
        return self.header is not None


def parse_columns(spec: str, fields: Sequence[str]) -> tuple[ColumnSpec, ...]:
    """Parse ``field=location`` pairs; every name in ``fields`` must be present."""
    parsed: dict[str, ColumnSpec] = {}
    for chunk in spec.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, location = chunk.partition("=")
        name = name.strip()
        location = location.strip()
        if not sep or not name or not location:
            raise ValueError(f"Invalid column mapping {chunk!r}; expected field=column")
        if name not in fields:
            raise ValueError(f"Unknown field {name!r}; expected one of {', '.join(fields)}")
        if len(location) >= 2 and location[0] == location[-1] == '"':
            parsed[name] = ColumnSpec(field=name, header=location[1:-1])
        elif _COLUMN_LETTERS.match(location):
            parsed[name] = ColumnSpec(field=name, letter=location)
        else:
            parsed[name] = ColumnSpec(field=name, header=location)

    missing = [name for name in fields if name not in parsed]
    if missing:
        raise ValueError(f"Column mapping is missing fields: {', '.join(missing)}")
    return tuple(parsed[name] for name in fields)


@dataclass(frozen=True)
class TableLayout:
    sheet: str
    columns: tuple[ColumnSpec, ...]

    @property
    def needs_header(self) -> bool:
        return any(col.by_header for col in self.columns)

    def query(self, sheet: Optional[str] = None) -> RangeQuery:
        target = sheet or self.sheet
        if self.needs_header:
            return RangeQuery(target, f"A1:{HEADER_SCAN_LAST_COLUMN}")
        last = max(column_to_index(col.letter or "A") for col in self.columns)
        return RangeQuery(target, f"A2:{index_to_column(last)}")

    def resolve(
        self,
        rows: list[RawRow],
        sheet: Optional[str] = None,
    ) -> tuple[ColumnMap, list[RawRow]]:
        """Return the field-to-index map and the data rows (header stripped)."""
        if not self.needs_header:
            return {col.field: column_to_index(col.letter or "A") for col in self.columns}, rows
        if not rows:
            return {}, []

        header = rows[0]
        positions: dict[str, int] = {}
        for idx, title in enumerate(header):
            key = str(title).strip().lower()
            if key and key not in positions:
                positions[key] = idx

        columns: ColumnMap = {}
        missing: list[str] = []
        for col in self.columns:
            if col.by_header:
                idx = positions.get((col.header or "").strip().lower())
                if idx is None:
                    missing.append(col.header or col.field)
                    continue
                columns[col.field] = idx
            elif (col.letter or "").lower() in positions:
                logger.warning(
                    "Column %s for %s matches a header title; using the title",
                    col.letter,
                    col.field,
                )
                columns[col.field] = positions[(col.letter or "").lower()]
            else:
                columns[col.field] = column_to_index(col.letter or "A")
        if missing:
            raise SheetLayoutError(
                f"Header row of {(sheet or self.sheet)!r} is missing columns: {', '.join(missing)}"
            )
        return columns, rows[1:]
