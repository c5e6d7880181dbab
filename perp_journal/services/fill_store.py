from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.models.fill import Fill
from perp_journal.models.position import PositionRecord


async def list_fills(session: AsyncSession) -> List[Fill]:
    result = await session.execute(
        select(Fill).order_by(Fill.timestamp.asc(), Fill.id.asc())
    )
    return list(result.scalars().all())


async def list_position_records(session: AsyncSession) -> List[PositionRecord]:
    result = await session.execute(select(PositionRecord))
    return list(result.scalars().all())


async def add_fill(session: AsyncSession, **fields) -> Fill:
    fill = Fill(**fields)
    session.add(fill)
    await session.commit()
    await session.refresh(fill)
    return fill


async def import_fills(session: AsyncSession, rows: Iterable[dict]) -> int:
    """
    Insert exchange fills, skipping any exchange_trade_id already stored.
    Returns the number of new rows.
    """
    rows = list(rows)
    ids = [r["exchange_trade_id"] for r in rows if r.get("exchange_trade_id")]

    known: set = set()
    if ids:
        result = await session.execute(
            select(Fill.exchange_trade_id).where(Fill.exchange_trade_id.in_(ids))
        )
        known = set(result.scalars().all())

    inserted = 0
    for r in rows:
        trade_id = r.get("exchange_trade_id")
        if trade_id and trade_id in known:
            continue
        session.add(Fill(**r))
        if trade_id:
            known.add(trade_id)
        inserted += 1

    await session.commit()
    return inserted
