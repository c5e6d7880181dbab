# perp_journal/services/aggregator.py

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.errors import FillStoreUnavailableError, MetadataUpdateError, PositionNotFoundError
from perp_journal.models.position import PositionRecord
from perp_journal.services.fill_grouper import group_fills_by_symbol
from perp_journal.services.fill_store import list_fills, list_position_records
from perp_journal.services.live_feed import LiveFeed, NullLiveFeed
from perp_journal.services.live_reconciler import reconcile_live_positions
from perp_journal.services.position_builder import Position, as_utc, build_positions

logger = logging.getLogger(__name__)

_UNSET = object()


async def _load_persisted(session: AsyncSession) -> list:
    try:
        return await list_position_records(session)
    except SQLAlchemyError:
        logger.exception("Could not load persisted positions; journals will not carry over")
        await session.rollback()
        return []


async def _load_live(live_feed: LiveFeed) -> list:
    try:
        live = await live_feed.fetch_open_positions()
    except Exception:
        # any feed failure means "no live data"
        logger.exception("Live feed failed; continuing without live data")
        return []

    if not isinstance(live, list):
        logger.warning("Live feed returned %r instead of a list; ignoring", type(live).__name__)
        return []
    return live


async def aggregate(session: AsyncSession, live_feed: Optional[LiveFeed] = None) -> List[Position]:
    """
    Rebuild every position from the full fill history.

    Read-only: nothing is written back. Only a fill-store failure is
    raised; persisted-position and live-feed failures degrade to
    "no metadata" / "no live data".
    """
    # persisted first: a failed read rolls back, which would expire loaded fills
    persisted = await _load_persisted(session)

    try:
        fills = await list_fills(session)
    except SQLAlchemyError as exc:
        logger.exception("Fill store unavailable")
        raise FillStoreUnavailableError("Could not load fills") from exc

    live = await _load_live(live_feed or NullLiveFeed())

    positions: List[Position] = []
    for symbol, symbol_fills in group_fills_by_symbol(fills).items():
        ordered = sorted(symbol_fills, key=lambda f: as_utc(f.timestamp))
        positions.extend(build_positions(symbol, ordered, persisted))

    positions.sort(key=lambda p: as_utc(p.opened_at), reverse=True)

    reconcile_live_positions([p for p in positions if p.is_open], live)

    logger.info(
        "Aggregated %d fills into %d positions (%d open, %d live)",
        len(fills),
        len(positions),
        sum(1 for p in positions if p.is_open),
        len(live),
    )
    return positions


async def update_position_metadata(
    session: AsyncSession,
    position_id: str,
    journal=_UNSET,
    category=_UNSET,
) -> PositionRecord:
    """
    Set journal and/or category on one persisted position.
    Fields not passed are left alone; other columns are never touched.
    """
    try:
        record = await session.get(PositionRecord, position_id)
    except SQLAlchemyError as exc:
        raise MetadataUpdateError(f"Could not load position {position_id!r}") from exc

    if record is None:
        raise PositionNotFoundError(position_id)

    if journal is not _UNSET:
        record.journal = journal or None
    if category is not _UNSET:
        record.category = category or None

    try:
        await session.commit()
        await session.refresh(record)
    except SQLAlchemyError as exc:
        await session.rollback()
        raise MetadataUpdateError(f"Could not save metadata for {position_id!r}") from exc

    return record
