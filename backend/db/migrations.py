"""Database migration utilities"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


async def add_completed_campaigns_column_if_missing(engine: AsyncEngine):
    """Add cars.completed_service_campaigns (UUID[]) to tables created before it existed"""
    async with engine.begin() as conn:
        result = await conn.execute(
            text("""
                SELECT column_name
                FROM information_schema.columns
                WHERE table_name = 'cars'
                AND column_name = 'completed_service_campaigns'
            """)
        )
        column_exists = result.scalar() is not None

        if not column_exists:
            logger.info("Adding completed_service_campaigns column to cars table...")
            await conn.execute(
                text("""
                    ALTER TABLE cars
                    ADD COLUMN completed_service_campaigns UUID[] NOT NULL DEFAULT '{}'
                """)
            )
            logger.info("Successfully added completed_service_campaigns column to cars table")
        else:
            logger.debug("completed_service_campaigns column already exists in cars table")

        # Reverse lookup (campaign -> vehicles) relies on this index
        await conn.execute(
            text("""
                CREATE INDEX IF NOT EXISTS idx_cars_completed_campaigns
                ON cars USING GIN (completed_service_campaigns)
            """)
        )


async def dedupe_completed_campaigns(engine: AsyncEngine) -> int:
    """Collapse duplicate ids in completed_service_campaigns left by older writers"""
    async with engine.begin() as conn:
        result = await conn.execute(
            text("""
                UPDATE cars
                SET completed_service_campaigns = ARRAY(
                        SELECT DISTINCT unnest(completed_service_campaigns)
                    ),
                    updated_at = NOW()
                WHERE cardinality(completed_service_campaigns) <> (
                    SELECT count(DISTINCT c) FROM unnest(completed_service_campaigns) AS c
                )
            """)
        )
        fixed = result.rowcount or 0

    if fixed:
        logger.warning("Removed duplicate completed campaigns on %d car(s)", fixed)
    return fixed
