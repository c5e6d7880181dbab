from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from perp_journal.config import get_settings
from perp_journal.db.database import get_db
from perp_journal.errors import DataIntegrityError, FillStoreUnavailableError
from perp_journal.services.aggregator import aggregate
from perp_journal.services.growth_projection import project_growth
from perp_journal.services.metrics import compute_position_metrics

router = APIRouter(prefix="/api/stats", tags=["stats"])


async def _closed_history(db: AsyncSession):
    # realized figures only; the live feed is not needed here
    try:
        return await aggregate(db)
    except FillStoreUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except DataIntegrityError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.get("/kpi")
async def kpi(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    positions = await _closed_history(db)
    return compute_position_metrics(positions, get_settings().starting_capital)


@router.get("/projection")
async def projection(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    positions = await _closed_history(db)
    return project_growth(positions, get_settings().starting_capital)
