from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from perp_journal.models.enums import FillSide
from perp_journal.utils.side_parser import parse_fill_side


class FillCreate(BaseModel):
    symbol: str = Field(..., min_length=1)
    side: FillSide
    price: Decimal = Field(..., gt=Decimal("0"))
    quantity: Decimal = Field(..., gt=Decimal("0"))
    timestamp: datetime | None = None
    market_id: int | None = None
    exchange: str = "Lighter"
    exchange_trade_id: str | None = None

    @field_validator("side", mode="before")
    @classmethod
    def _parse_side(cls, v):
        side = parse_fill_side(v)
        if side is None:
            raise ValueError(f"unknown side {v!r} (expected BUY or SELL)")
        return side

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, v: str) -> str:
        return v.strip().upper()


class FillOut(BaseModel):
    id: int | None = None
    symbol: str
    market_id: int | None = None
    side: FillSide
    price: float
    quantity: float
    timestamp: datetime
    exchange: str | None = None
    position_id: str | None = None

    class Config:
        from_attributes = True
