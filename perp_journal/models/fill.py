from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from perp_journal.db.database import Base
from perp_journal.models.enums import FillSide


class Fill(Base):
    """
    One executed trade. Append-only: the aggregation core never edits a fill.
    position_id is written by position sync only.
    """

    __tablename__ = "fills"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # exchange-side trade id, lets re-imports skip fills we already have
    exchange_trade_id: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)

    symbol: Mapped[str] = mapped_column(String(32), index=True, default="")
    market_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    side: Mapped[FillSide] = mapped_column(
        Enum(FillSide, name="fill_side_enum", native_enum=True),
        nullable=False,
    )

    price: Mapped[Decimal] = mapped_column(Numeric(30, 12), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(30, 12), nullable=False)

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    exchange: Mapped[str] = mapped_column(String(32), default="Lighter")

    position_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("positions.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
