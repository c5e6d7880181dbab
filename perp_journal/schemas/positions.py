from datetime import datetime

from pydantic import BaseModel

from perp_journal.models.enums import PositionSide, PositionStatus
from perp_journal.schemas.fills import FillOut


class PositionOut(BaseModel):
    id: str
    symbol: str
    market_id: int | None = None
    exchange: str
    side: PositionSide
    status: PositionStatus

    total_quantity: float
    avg_entry_price: float | None = None
    avg_exit_price: float | None = None
    total_entry_cost: float
    total_exit_revenue: float
    realized_pnl: float | None = None
    realized_pnl_percent: float | None = None

    # live overlay (open positions with a live match only)
    current_price: float | None = None
    position_size_usd: float | None = None
    liquidation_price: float | None = None
    margin: float | None = None
    leverage: float | None = None
    funding: float | None = None
    unrealized_pnl: float | None = None
    unrealized_pnl_percent: float | None = None

    opened_at: datetime
    closed_at: datetime | None = None

    journal: str | None = None
    category: str | None = None

    fills_count: int
    fills: list[FillOut] = []

    class Config:
        from_attributes = True


class PositionMetadataUpdate(BaseModel):
    """Only the fields actually sent are written."""

    journal: str | None = None
    category: str | None = None


class PositionMetadataOut(BaseModel):
    id: str
    journal: str | None
    category: str | None

    class Config:
        from_attributes = True


class SyncResult(BaseModel):
    positions: int
    created: int
    updated: int
    linked_fills: int
