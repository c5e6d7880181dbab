import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from perp_journal.api import fills as fills_router
from perp_journal.api import positions as positions_router
from perp_journal.api import stats as stats_router
from perp_journal.config import get_settings
from perp_journal.db.database import Base, engine
import perp_journal.models  # noqa: F401  registers tables on Base.metadata

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Perp Journal API")

# CORS - keep permissive for local dev, lock down in production via CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(positions_router.router)
app.include_router(fills_router.router)
app.include_router(stats_router.router)


@app.on_event("startup")
async def on_startup():
    """
    Create DB tables on startup (development convenience).
    For production use Alembic migrations instead.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured (create_all)")
    except Exception:
        logger.exception("Error creating tables on startup")
