from __future__ import annotations


class SheetError(Exception):
    """Base class for failures reading the trading spreadsheet."""


class SheetUnavailableError(SheetError):
    """The Sheets API call failed (HTTP error, transport error or timeout)."""

    def __init__(self, range_a1: str, reason: str) -> None:
        super().__init__(f"Failed to read {range_a1}: {reason}")
        self.range_a1 = range_a1
        self.reason = reason


class NoSheetDataError(SheetError):
    """A read succeeded but the range held no values."""

    def __init__(self, range_a1: str) -> None:
        super().__init__(f"No values returned for {range_a1}")
        self.range_a1 = range_a1


class SheetLayoutError(SheetError):
    """The sheet does not match the configured column layout."""


class InvalidSheetNameError(SheetError):
    pass
