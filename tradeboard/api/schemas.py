from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel

from tradeboard.core.sheets.models import PerformanceEntry, PnlPoint, TradeRecord


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: Literal["ok"]


class LoginRequest(BaseModel):
    # Anything but the configured string pair is answered with 401.
    email: Optional[Any] = None
    password: Optional[Any] = None


class LoginResponse(BaseModel):
    success: Literal[True]
    token: str
    message: str


class VerifyTokenResponse(BaseModel):
    success: Literal[True]
    user: dict[str, Any]


class SheetProbeData(BaseModel):
    range: str
    values: list[list[str]]


class SheetProbeResponse(BaseModel):
    success: Literal[True]
    data: SheetProbeData


class PerformanceEntryOut(BaseModel):
    title: str
    value: str
    change: str

    @classmethod
    def from_entry(cls, entry: PerformanceEntry) -> "PerformanceEntryOut":
        return cls(title=entry.title, value=entry.value, change=entry.change)


class TradeRecordOut(BaseModel):
    date: str
    name: str
    tradeType: str
    pnl: str

    @classmethod
    def from_record(cls, record: TradeRecord) -> "TradeRecordOut":
        return cls(
            date=record.date,
            name=record.name,
            tradeType=record.trade_type,
            pnl=record.pnl,
        )


class PnlPointOut(BaseModel):
    date: str
    pnl: Optional[float]

    @classmethod
    def from_point(cls, point: PnlPoint) -> "PnlPointOut":
        return cls(date=point.date, pnl=point.pnl)
