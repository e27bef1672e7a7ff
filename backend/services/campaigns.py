"""
Service-campaign catalog.

Owns campaign records: targeting rules, status and the campaign-global
``is_completed`` flag. Per-vehicle completion lives on the vehicle (see
services/completion.py) and is not touched here.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import any_, delete, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from core.errors import Conflict, NotFound, integrity_violation
from db.service_campaign import CampaignStatus, ServiceCampaign
from schemas.service_campaigns import ServiceCampaignCreate, ServiceCampaignUpdate

logger = logging.getLogger(__name__)

_NEWEST_FIRST = ServiceCampaign.created_at.desc()


async def get_campaign(db: AsyncSession, campaign_id: UUID) -> Optional[ServiceCampaign]:
    res = await db.execute(select(ServiceCampaign).where(ServiceCampaign.id == campaign_id))
    return res.scalar_one_or_none()


async def get_campaign_by_article(db: AsyncSession, article: str) -> Optional[ServiceCampaign]:
    res = await db.execute(select(ServiceCampaign).where(ServiceCampaign.article == article))
    return res.scalar_one_or_none()


async def list_campaigns(
    db: AsyncSession,
    *,
    brand_id: Optional[UUID] = None,
    car_model_id: Optional[UUID] = None,
    status: Optional[CampaignStatus] = None,
    is_mandatory: Optional[bool] = None,
    is_completed: Optional[bool] = None,
    vin: Optional[str] = None,
) -> List[ServiceCampaign]:
    """List campaigns, newest first. ``vin`` matches explicit targeting only."""
    stmt = select(ServiceCampaign)
    if brand_id is not None:
        stmt = stmt.where(ServiceCampaign.brand_id == brand_id)
    if car_model_id is not None:
        stmt = stmt.where(ServiceCampaign.car_model_id == car_model_id)
    if status is not None:
        stmt = stmt.where(ServiceCampaign.status == status)
    if is_mandatory is not None:
        stmt = stmt.where(ServiceCampaign.is_mandatory == is_mandatory)
    if is_completed is not None:
        stmt = stmt.where(ServiceCampaign.is_completed == is_completed)
    if vin:
        stmt = stmt.where(vin.strip().upper() == any_(ServiceCampaign.target_vins))
    res = await db.execute(stmt.order_by(_NEWEST_FIRST))
    return list(res.scalars().all())


async def list_active(db: AsyncSession, brand_id: UUID, car_model_id: UUID) -> List[ServiceCampaign]:
    return await list_campaigns(
        db, brand_id=brand_id, car_model_id=car_model_id, status=CampaignStatus.ACTIVE
    )


async def create_campaign(db: AsyncSession, payload: ServiceCampaignCreate) -> dict:
    tbl = ServiceCampaign.__table__
    stmt = (
        insert(tbl)
        .values(
            **payload.model_dump(),
            is_completed=False,
            status=CampaignStatus.ACTIVE,
        )
        .on_conflict_do_nothing(index_elements=[tbl.c.article])
        .returning(*tbl.c)
    )
    try:
        row = (await db.execute(stmt)).mappings().first()
    except IntegrityError as e:
        await db.rollback()
        if integrity_violation(e) == "foreign_key":
            raise NotFound("Brand or car model not found") from e
        raise
    if row is None:
        await db.rollback()
        logger.warning("Campaign article %r already exists", payload.article)
        raise Conflict(f"Service campaign with article '{payload.article}' already exists")
    await db.commit()
    logger.info("Created service campaign %s (%s)", row["id"], row["article"])
    return dict(row)


async def _update_returning(db: AsyncSession, campaign_id: UUID, values: dict) -> Optional[dict]:
    tbl = ServiceCampaign.__table__
    stmt = (
        update(tbl)
        .where(tbl.c.id == campaign_id)
        .values(**values, updated_at=func.now())
        .returning(*tbl.c)
    )
    try:
        row = (await db.execute(stmt)).mappings().first()
    except IntegrityError as e:
        await db.rollback()
        kind = integrity_violation(e)
        if kind == "unique":
            raise Conflict(f"Service campaign with article '{values.get('article')}' already exists") from e
        if kind == "foreign_key":
            raise NotFound("Brand or car model not found") from e
        raise
    await db.commit()
    return dict(row) if row is not None else None


async def update_campaign(db: AsyncSession, campaign_id: UUID, payload: ServiceCampaignUpdate) -> Optional[dict]:
    """Partial update; an article change that collides surfaces as Conflict from the UPDATE itself."""
    data = payload.model_dump(exclude_unset=True)
    for key in ("article", "name", "brand_id", "car_model_id", "target_vins",
                "required_parts", "required_works", "is_mandatory", "is_completed", "status"):
        # these columns are NOT NULL; an explicit null means "leave as is"
        if key in data and data[key] is None:
            data.pop(key)
    if not data:
        campaign = await get_campaign(db, campaign_id)
        return _campaign_row(campaign) if campaign is not None else None
    row = await _update_returning(db, campaign_id, data)
    if row is not None:
        logger.info("Updated service campaign %s (%s)", campaign_id, ", ".join(sorted(data)))
    return row


async def set_status(db: AsyncSession, campaign_id: UUID, status: CampaignStatus) -> Optional[dict]:
    row = await _update_returning(db, campaign_id, {"status": status})
    if row is not None:
        logger.info("Service campaign %s status -> %s", campaign_id, status.value)
    return row


async def mark_campaign_completed(db: AsyncSession, campaign_id: UUID) -> Optional[dict]:
    """Close the campaign globally. Does not touch any vehicle's completion set."""
    return await _update_returning(
        db, campaign_id, {"is_completed": True, "status": CampaignStatus.COMPLETED}
    )


async def mark_campaign_pending(db: AsyncSession, campaign_id: UUID) -> Optional[dict]:
    return await _update_returning(
        db, campaign_id, {"is_completed": False, "status": CampaignStatus.ACTIVE}
    )


async def delete_campaign(db: AsyncSession, campaign_id: UUID) -> bool:
    res = await db.execute(delete(ServiceCampaign).where(ServiceCampaign.id == campaign_id))
    await db.commit()
    deleted = (res.rowcount or 0) > 0
    if deleted:
        logger.info("Deleted service campaign %s", campaign_id)
    return deleted


def _campaign_row(c: ServiceCampaign) -> dict:
    return {col.name: getattr(c, col.name) for col in ServiceCampaign.__table__.c}
