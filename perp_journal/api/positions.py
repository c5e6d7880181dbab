# perp_journal/api/positions.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.db.database import get_db
from perp_journal.errors import (
    DataIntegrityError,
    FillStoreUnavailableError,
    MetadataUpdateError,
    PositionNotFoundError,
)
from perp_journal.schemas.positions import (
    PositionMetadataOut,
    PositionMetadataUpdate,
    PositionOut,
    SyncResult,
)
from perp_journal.services.aggregator import aggregate, update_position_metadata
from perp_journal.services.live_feed import LiveFeed, get_live_feed
from perp_journal.services.position_sync import sync_positions

router = APIRouter(prefix="/api/positions", tags=["positions"])


async def _aggregate_or_error(db: AsyncSession, live_feed: LiveFeed):
    try:
        return await aggregate(db, live_feed)
    except FillStoreUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    except DataIntegrityError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.get("", response_model=list[PositionOut])
async def list_positions(
    db: AsyncSession = Depends(get_db),
    live_feed: LiveFeed = Depends(get_live_feed),
):
    """
    Positions rebuilt from every fill, newest first.
    Open positions carry live data when the feed has it.
    """
    positions = await _aggregate_or_error(db, live_feed)
    return [PositionOut.model_validate(p) for p in positions]


@router.patch("/{position_id}", response_model=PositionMetadataOut)
async def patch_position_metadata(
    position_id: str,
    payload: PositionMetadataUpdate,
    db: AsyncSession = Depends(get_db),
):
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="Nothing to update (journal or category)")

    try:
        return await update_position_metadata(db, position_id, **updates)
    except PositionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except MetadataUpdateError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post("/sync", response_model=SyncResult)
async def sync_all_positions(
    db: AsyncSession = Depends(get_db),
    live_feed: LiveFeed = Depends(get_live_feed),
):
    """Recompute positions and persist them (needed before journals can be edited)."""
    positions = await _aggregate_or_error(db, live_feed)
    counts = await sync_positions(db, positions)
    return {"positions": len(positions), **counts}
