from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from perp_journal.config import get_settings

settings = get_settings()

# Create async engine
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
)

# Async session factory
AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)

# Export declarative Base for models and alembic
Base = declarative_base()


def get_async_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
