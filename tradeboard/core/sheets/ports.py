from __future__ import annotations

from typing import Protocol, Sequence

from tradeboard.core.sheets.models import RangeQuery, SheetValues


class SheetReader(Protocol):
    async def read(self, query: RangeQuery) -> SheetValues:
        """Return the cell values for one range; raise SheetUnavailableError on failure."""
        raise NotImplementedError

    async def read_many(self, queries: Sequence[RangeQuery]) -> list[SheetValues]:
        """Read several ranges concurrently; any single failure fails the batch."""
        raise NotImplementedError
