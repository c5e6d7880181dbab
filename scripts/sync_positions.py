import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.config import get_settings
from perp_journal.db.database import get_async_sessionmaker
from perp_journal.services.aggregator import aggregate
from perp_journal.services.live_feed import live_feed_from_settings
from perp_journal.services.position_sync import sync_positions

logger = logging.getLogger("sync_positions")


async def rebuild_positions(session: AsyncSession) -> dict:
    # 1. Recompute from the full fill history (live data included when configured)
    positions = await aggregate(session, live_feed_from_settings())

    # 2. Persist derived fields + fill links; journals are kept
    counts = await sync_positions(session, positions)
    return {"positions": len(positions), **counts}


async def main() -> None:
    logging.basicConfig(level=get_settings().log_level)
    sessionmaker = get_async_sessionmaker()

    async with sessionmaker() as session:
        counts = await rebuild_positions(session)
        logger.info(
            "positions synced: %(positions)d total, %(created)d created, "
            "%(updated)d updated, %(linked_fills)d fills linked",
            counts,
        )


if __name__ == "__main__":
    asyncio.run(main())
