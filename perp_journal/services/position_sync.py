import logging
from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.models.position import PositionRecord
from perp_journal.services.position_builder import Position

logger = logging.getLogger(__name__)


def _apply_derived(record: PositionRecord, pos: Position) -> None:
    record.symbol = pos.symbol
    record.market_id = pos.market_id
    record.side = pos.side.value
    record.status = pos.status.value
    record.total_quantity = pos.total_quantity
    record.avg_entry_price = pos.avg_entry_price
    record.avg_exit_price = pos.avg_exit_price
    record.total_entry_cost = pos.total_entry_cost
    record.total_exit_revenue = pos.total_exit_revenue
    record.realized_pnl = pos.realized_pnl
    record.realized_pnl_percent = pos.realized_pnl_percent
    record.opened_at = pos.opened_at
    record.closed_at = pos.closed_at
    record.fills_count = pos.fills_count
    record.exchange = pos.exchange

    # annotations only flow one way: never blank out what the user wrote
    if pos.journal:
        record.journal = pos.journal
    if pos.category:
        record.category = pos.category


async def sync_positions(session: AsyncSession, positions: Iterable[Position]) -> Dict[str, int]:
    """
    Persist aggregated positions and link every fill to its position.

    This is the only place derived position fields are written;
    aggregate() itself stays read-only.
    """
    positions = list(positions)
    ids = [p.id for p in positions]

    existing: Dict[str, PositionRecord] = {}
    if ids:
        result = await session.execute(select(PositionRecord).where(PositionRecord.id.in_(ids)))
        existing = {r.id: r for r in result.scalars().all()}

    created = updated = linked = 0

    for pos in positions:
        record = existing.get(pos.id)
        if record is None:
            record = PositionRecord(id=pos.id)
            session.add(record)
            created += 1
        else:
            updated += 1
        _apply_derived(record, pos)

    # position rows must exist before fills point at them
    await session.flush()

    for pos in positions:
        for f in pos.fills:
            if getattr(f, "position_id", None) != pos.id:
                f.position_id = pos.id
                linked += 1

    await session.commit()

    logger.info("Synced positions: %d created, %d updated, %d fill links", created, updated, linked)
    return {"created": created, "updated": updated, "linked_fills": linked}
