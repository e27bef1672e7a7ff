"""
Per-vehicle set of completed service campaigns.

Membership changes are single UPDATE statements on ``cars`` using
``array_append`` guarded by ``NOT (:cid = ANY(...))`` and ``array_remove``.
Two concurrent marks of different campaigns both land; two concurrent marks
of the same campaign leave one entry.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import any_, literal, not_, select, update
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from core.errors import NotFound
from db.car import Car
from services import campaigns as campaign_catalog

logger = logging.getLogger(__name__)


def _campaign_param(campaign_id: UUID):
    return literal(campaign_id, PG_UUID(as_uuid=True))


async def _update_vehicle(db: AsyncSession, stmt) -> Optional[dict]:
    tbl = Car.__table__
    stmt = stmt.values(updated_at=func.now()).returning(*tbl.c)
    row = (await db.execute(stmt)).mappings().first()
    if row is None:
        await db.rollback()
        return None
    await db.commit()
    return dict(row)


async def mark_completed(db: AsyncSession, vehicle_id: UUID, campaign_id: UUID) -> Optional[dict]:
    """
    Add ``campaign_id`` to the vehicle's completed set.

    Returns the updated vehicle, or None when the vehicle does not exist or
    already has the campaign marked. Raises NotFound for an unknown campaign.
    """
    if await campaign_catalog.get_campaign(db, campaign_id) is None:
        raise NotFound("Service campaign not found")

    tbl = Car.__table__
    col = tbl.c.completed_service_campaigns
    cid = _campaign_param(campaign_id)
    stmt = (
        update(tbl)
        .where(tbl.c.id == vehicle_id)
        .where(not_(cid == any_(col)))
        .values(completed_service_campaigns=func.array_append(col, cid))
    )
    row = await _update_vehicle(db, stmt)
    if row is not None:
        logger.info("Vehicle %s: campaign %s marked completed", vehicle_id, campaign_id)
    return row


async def unmark_completed(db: AsyncSession, vehicle_id: UUID, campaign_id: UUID) -> Optional[dict]:
    """Remove ``campaign_id`` from the set. None only when the vehicle does not exist."""
    tbl = Car.__table__
    col = tbl.c.completed_service_campaigns
    stmt = (
        update(tbl)
        .where(tbl.c.id == vehicle_id)
        .values(completed_service_campaigns=func.array_remove(col, _campaign_param(campaign_id)))
    )
    row = await _update_vehicle(db, stmt)
    if row is not None:
        logger.info("Vehicle %s: campaign %s unmarked", vehicle_id, campaign_id)
    return row


async def clear_completed(db: AsyncSession, vehicle_id: UUID) -> Optional[dict]:
    tbl = Car.__table__
    stmt = update(tbl).where(tbl.c.id == vehicle_id).values(completed_service_campaigns=[])
    row = await _update_vehicle(db, stmt)
    if row is not None:
        logger.info("Vehicle %s: completed campaigns cleared", vehicle_id)
    return row


async def vehicles_by_completed_campaign(db: AsyncSession, campaign_id: UUID) -> List[Car]:
    stmt = (
        select(Car)
        .where(_campaign_param(campaign_id) == any_(Car.completed_service_campaigns))
        .order_by(Car.created_at.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())
