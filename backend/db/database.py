from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings


class Base(DeclarativeBase):
    pass


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,  # Verify connections before use
)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


def register_models():
    """Import every model module so its table lands on Base.metadata."""
    from db import brand, car, car_model, part, service_campaign, warehouse  # noqa: F401


async def create_db_and_tables():
    register_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


async def check_db_health() -> dict:
    """Round-trip a trivial query; connectivity errors propagate to the caller."""
    async with async_session_maker() as session:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
    return {"status": "healthy", "database": "connected"}
