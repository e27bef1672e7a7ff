"""
Part, vehicle, brand and car-model catalogs.

These are plain persistence: the stock ledger and the campaign services call
in here for existence checks and attribute reads. Uniqueness (part article,
VIN, brand name, model name per brand) is enforced by a single
``INSERT ... ON CONFLICT DO NOTHING RETURNING``; an empty RETURNING means the
value was taken.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Conflict, NotFound, integrity_violation
from db.brand import Brand
from db.car import Car, CarStatus
from db.car_model import CarModel
from db.part import Part
from schemas.brands import BrandCreate, CarModelCreate
from schemas.cars import CarCreate
from schemas.parts import PartCreate

logger = logging.getLogger(__name__)


async def _insert_unique(db: AsyncSession, stmt, *, missing_ref: str) -> Optional[dict]:
    """Run an ON CONFLICT DO NOTHING insert; None when the unique value was taken."""
    try:
        row = (await db.execute(stmt)).mappings().first()
    except IntegrityError as e:
        await db.rollback()
        if integrity_violation(e) == "foreign_key":
            raise NotFound(missing_ref) from e
        raise
    if row is None:
        await db.rollback()
        return None
    await db.commit()
    return dict(row)


# ---------------------------------------------------------------------------
# Parts
# ---------------------------------------------------------------------------

async def get_part(db: AsyncSession, part_id: UUID) -> Optional[Part]:
    res = await db.execute(select(Part).where(Part.id == part_id))
    return res.scalar_one_or_none()


async def part_exists(db: AsyncSession, part_id: UUID) -> bool:
    res = await db.execute(select(Part.id).where(Part.id == part_id))
    return res.scalar_one_or_none() is not None


async def list_parts(db: AsyncSession) -> List[Part]:
    res = await db.execute(select(Part).order_by(Part.article.asc()))
    return list(res.scalars().all())


async def create_part(db: AsyncSession, payload: PartCreate) -> dict:
    tbl = Part.__table__
    stmt = (
        insert(tbl)
        .values(**payload.model_dump())
        .on_conflict_do_nothing(index_elements=[tbl.c.article])
        .returning(*tbl.c)
    )
    row = await _insert_unique(db, stmt, missing_ref="Brand or car model not found")
    if row is None:
        logger.warning("Part article %r already exists", payload.article)
        raise Conflict(f"Part with article '{payload.article}' already exists")
    logger.info("Created part %s (%s)", row["id"], row["article"])
    return row


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------

async def get_vehicle(db: AsyncSession, vehicle_id: UUID) -> Optional[Car]:
    res = await db.execute(select(Car).where(Car.id == vehicle_id))
    return res.scalar_one_or_none()


async def find_vehicle_by_vin(db: AsyncSession, vin: str) -> Optional[Car]:
    res = await db.execute(select(Car).where(Car.vin == vin.strip().upper()))
    return res.scalar_one_or_none()


async def list_vehicles(db: AsyncSession, status: Optional[CarStatus] = None) -> List[Car]:
    stmt = select(Car)
    if status is not None:
        stmt = stmt.where(Car.status == status)
    res = await db.execute(stmt.order_by(Car.created_at.desc()))
    return list(res.scalars().all())


async def create_vehicle(db: AsyncSession, payload: CarCreate) -> dict:
    tbl = Car.__table__
    stmt = (
        insert(tbl)
        .values(**payload.model_dump(), status=CarStatus.AVAILABLE, completed_service_campaigns=[])
        .on_conflict_do_nothing(index_elements=[tbl.c.vin])
        .returning(*tbl.c)
    )
    row = await _insert_unique(db, stmt, missing_ref="Brand or car model not found")
    if row is None:
        logger.warning("VIN %s already registered", payload.vin)
        raise Conflict(f"Car with VIN '{payload.vin}' already exists")
    logger.info("Created car %s (VIN %s)", row["id"], row["vin"])
    return row


# ---------------------------------------------------------------------------
# Brands and car models
# ---------------------------------------------------------------------------

async def list_brands(db: AsyncSession) -> List[Brand]:
    res = await db.execute(select(Brand).order_by(func.lower(Brand.name).asc()))
    return list(res.scalars().all())


async def get_brand(db: AsyncSession, brand_id: UUID) -> Optional[Brand]:
    res = await db.execute(select(Brand).where(Brand.id == brand_id))
    return res.scalar_one_or_none()


async def create_brand(db: AsyncSession, payload: BrandCreate) -> dict:
    tbl = Brand.__table__
    stmt = (
        insert(tbl)
        .values(name=payload.name, country=payload.country)
        .on_conflict_do_nothing(index_elements=[tbl.c.name])
        .returning(*tbl.c)
    )
    row = await _insert_unique(db, stmt, missing_ref="Brand not found")
    if row is None:
        raise Conflict(f"Brand '{payload.name}' already exists")
    logger.info("Created brand %s (%s)", row["id"], row["name"])
    return row


async def list_car_models(db: AsyncSession, brand_id: UUID) -> List[CarModel]:
    res = await db.execute(
        select(CarModel).where(CarModel.brand_id == brand_id).order_by(func.lower(CarModel.name).asc())
    )
    return list(res.scalars().all())


async def create_car_model(db: AsyncSession, brand_id: UUID, payload: CarModelCreate) -> dict:
    tbl = CarModel.__table__
    stmt = (
        insert(tbl)
        .values(name=payload.name, brand_id=brand_id)
        .on_conflict_do_nothing(constraint="ux_car_models_brand_name")
        .returning(*tbl.c)
    )
    row = await _insert_unique(db, stmt, missing_ref="Brand not found")
    if row is None:
        raise Conflict(f"Model '{payload.name}' already exists for this brand")
    logger.info("Created car model %s (%s)", row["id"], row["name"])
    return row
