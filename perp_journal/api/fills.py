from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.db.database import get_db
from perp_journal.schemas.fills import FillCreate, FillOut
from perp_journal.services.fill_store import add_fill, import_fills, list_fills
from perp_journal.services.markets import MARKET_SYMBOLS

router = APIRouter(prefix="/api/fills", tags=["fills"])

_SYMBOL_TO_MARKET = {symbol: market_id for market_id, symbol in MARKET_SYMBOLS.items()}


@router.get("", response_model=list[FillOut])
async def get_fills(db: AsyncSession = Depends(get_db)):
    return await list_fills(db)


@router.post("", response_model=FillOut, status_code=status.HTTP_201_CREATED)
async def log_fill(payload: FillCreate, db: AsyncSession = Depends(get_db)):
    """Record a manually entered fill."""
    fields = payload.model_dump()
    if fields["timestamp"] is None:
        fields["timestamp"] = datetime.now(timezone.utc)
    if fields["market_id"] is None:
        fields["market_id"] = _SYMBOL_TO_MARKET.get(fields["symbol"])

    return await add_fill(db, **fields)


@router.post("/import")
async def import_exchange_fills(payload: list[FillCreate], db: AsyncSession = Depends(get_db)):
    """Bulk import; rows whose exchange_trade_id is already stored are skipped."""
    now = datetime.now(timezone.utc)
    rows = []
    for item in payload:
        fields = item.model_dump()
        fields["timestamp"] = fields["timestamp"] or now
        if fields["market_id"] is None:
            fields["market_id"] = _SYMBOL_TO_MARKET.get(fields["symbol"])
        rows.append(fields)

    inserted = await import_fills(db, rows)
    return {"received": len(rows), "inserted": inserted}
