from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from perp_journal.db.database import Base


class PositionRecord(Base):
    """
    Persisted snapshot of an aggregated position.

    Aggregation only reads this table (to carry journal/category over).
    Writes come from update_position_metadata and sync_positions.
    """

    __tablename__ = "positions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    symbol: Mapped[str] = mapped_column(String(32), index=True)
    market_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    side: Mapped[str] = mapped_column(String(8))  # LONG / SHORT
    status: Mapped[str] = mapped_column(String(8), index=True)  # open / closed

    total_quantity: Mapped[Decimal] = mapped_column(Numeric(30, 12), default=Decimal("0"))
    avg_entry_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 12), nullable=True)
    avg_exit_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 12), nullable=True)
    total_entry_cost: Mapped[Decimal] = mapped_column(Numeric(30, 12), default=Decimal("0"))
    total_exit_revenue: Mapped[Decimal] = mapped_column(Numeric(30, 12), default=Decimal("0"))
    realized_pnl: Mapped[Decimal | None] = mapped_column(Numeric(30, 12), nullable=True)
    realized_pnl_percent: Mapped[Decimal | None] = mapped_column(Numeric(30, 12), nullable=True)

    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    journal: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)

    fills_count: Mapped[int] = mapped_column(Integer, default=0)
    exchange: Mapped[str] = mapped_column(String(32), default="Lighter")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
