"""
Inventory stock ledger.

One ``warehouse`` row per part. Every quantity change is a single
``UPDATE ... RETURNING`` statement so concurrent movements on the same part
serialize on the row lock and can never drive ``quantity`` below zero or
past ``MAX_QUANTITY``:

- incoming:   quantity = quantity + n   WHERE quantity <= MAX_QUANTITY - n
- outgoing:   quantity = quantity - n   WHERE quantity >= n
- adjustment: quantity = n

Nothing here reads the current quantity and writes it back.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete as sql_delete
from sqlalchemy import select, update as sql_update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from core.errors import Conflict, InsufficientStock, NotFound, ValidationFailure, integrity_violation
from db.part import Part
from db.warehouse import MAX_QUANTITY, WarehouseEntry
from schemas.warehouse import (
    StockMovement,
    StockMovementType,
    WarehouseEntryCreate,
    WarehouseEntryUpdate,
)
from services import catalog

logger = logging.getLogger(__name__)

DEFAULT_MIN_STOCK_LEVEL = 0
DEFAULT_MAX_STOCK_LEVEL = 100


def _with_part_columns(stmt):
    return stmt.join(Part, Part.id == WarehouseEntry.part_id).add_columns(
        Part.article.label("part_article"), Part.name.label("part_name")
    )


def _entry_with_part(entry: WarehouseEntry, article: str, name: str) -> dict:
    row = {col.name: getattr(entry, col.name) for col in WarehouseEntry.__table__.c}
    row["part_article"] = article
    row["part_name"] = name
    return row


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def list_entries(db: AsyncSession) -> List[dict]:
    stmt = _with_part_columns(select(WarehouseEntry)).order_by(Part.article.asc())
    res = await db.execute(stmt)
    return [_entry_with_part(e, article, name) for e, article, name in res.all()]


async def get(db: AsyncSession, entry_id: UUID) -> Optional[WarehouseEntry]:
    res = await db.execute(select(WarehouseEntry).where(WarehouseEntry.id == entry_id))
    return res.scalar_one_or_none()


async def get_by_part(db: AsyncSession, part_id: UUID) -> Optional[WarehouseEntry]:
    res = await db.execute(select(WarehouseEntry).where(WarehouseEntry.part_id == part_id))
    return res.scalar_one_or_none()


async def get_by_article(db: AsyncSession, article: str) -> Optional[dict]:
    stmt = _with_part_columns(select(WarehouseEntry)).where(Part.article == article.strip())
    row = (await db.execute(stmt)).first()
    if row is None:
        return None
    entry, part_article, part_name = row
    return _entry_with_part(entry, part_article, part_name)


async def list_by_location(db: AsyncSession, location: str) -> List[dict]:
    stmt = (
        _with_part_columns(select(WarehouseEntry))
        .where(WarehouseEntry.location.ilike(f"%{location.strip()}%"))
        .order_by(WarehouseEntry.location.asc(), Part.article.asc())
    )
    res = await db.execute(stmt)
    return [_entry_with_part(e, article, name) for e, article, name in res.all()]


async def low_stock(db: AsyncSession) -> List[dict]:
    """Entries at or below their minimum level, emptiest first."""
    stmt = (
        _with_part_columns(select(WarehouseEntry))
        .where(WarehouseEntry.quantity <= WarehouseEntry.min_stock_level)
        .order_by(WarehouseEntry.quantity.asc(), Part.article.asc())
    )
    res = await db.execute(stmt)
    return [_entry_with_part(e, article, name) for e, article, name in res.all()]


async def total_value(db: AsyncSession) -> float:
    """Sum of quantity * purchase price over all entries; 0.0 when the ledger is empty."""
    stmt = (
        select(func.coalesce(func.sum(WarehouseEntry.quantity * Part.purchase_price), 0.0))
        .select_from(WarehouseEntry)
        .join(Part, Part.id == WarehouseEntry.part_id)
    )
    value = (await db.execute(stmt)).scalar_one()
    return float(value or 0.0)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create(db: AsyncSession, payload: WarehouseEntryCreate) -> dict:
    if payload.quantity < 0:
        raise ValidationFailure("Quantity cannot be negative")
    if payload.quantity > MAX_QUANTITY:
        raise ValidationFailure(f"Quantity cannot exceed {MAX_QUANTITY}")
    if not await catalog.part_exists(db, payload.part_id):
        raise NotFound("Part not found")

    tbl = WarehouseEntry.__table__
    min_level = payload.min_stock_level
    max_level = payload.max_stock_level
    stmt = (
        insert(tbl)
        .values(
            part_id=payload.part_id,
            quantity=payload.quantity,
            min_stock_level=DEFAULT_MIN_STOCK_LEVEL if min_level is None else min_level,
            max_stock_level=DEFAULT_MAX_STOCK_LEVEL if max_level is None else max_level,
            location=payload.location,
        )
        .on_conflict_do_nothing(index_elements=[tbl.c.part_id])
        .returning(*tbl.c)
    )
    try:
        row = (await db.execute(stmt)).mappings().first()
    except IntegrityError as e:
        await db.rollback()
        # part removed after the existence check
        if integrity_violation(e) == "foreign_key":
            raise NotFound("Part not found") from e
        raise
    if row is None:
        await db.rollback()
        logger.warning("Warehouse entry for part %s already exists", payload.part_id)
        raise Conflict("Warehouse entry for this part already exists")
    await db.commit()
    logger.info("Created warehouse entry %s for part %s (qty=%s)", row["id"], row["part_id"], row["quantity"])
    return dict(row)


async def apply_movement(db: AsyncSession, part_id: UUID, movement: StockMovement) -> dict:
    """
    Apply one stock movement to the entry of ``part_id``.

    Raises ``InsufficientStock`` when an outgoing movement exceeds the stock on
    hand, ``ValidationFailure`` when an incoming movement would push the
    quantity past ``MAX_QUANTITY`` and ``NotFound`` when the part has no
    entry. In every case nothing changed.
    """
    n = movement.quantity
    if n < 1:
        raise ValidationFailure("Movement quantity must be at least 1")
    if n > MAX_QUANTITY:
        raise ValidationFailure(f"Movement quantity cannot exceed {MAX_QUANTITY}")

    tbl = WarehouseEntry.__table__
    stmt = sql_update(tbl).where(tbl.c.part_id == part_id)
    if movement.movement_type == StockMovementType.INCOMING:
        stmt = stmt.where(tbl.c.quantity <= MAX_QUANTITY - n).values(quantity=tbl.c.quantity + n)
    elif movement.movement_type == StockMovementType.OUTGOING:
        stmt = stmt.where(tbl.c.quantity >= n).values(quantity=tbl.c.quantity - n)
    elif movement.movement_type == StockMovementType.ADJUSTMENT:
        stmt = stmt.values(quantity=n)
    else:
        raise ValidationFailure(f"Unknown movement type: {movement.movement_type}")
    stmt = stmt.values(updated_at=func.now()).returning(*tbl.c)

    row = (await db.execute(stmt)).mappings().first()
    if row is None:
        await db.rollback()
        if movement.movement_type != StockMovementType.ADJUSTMENT and await get_by_part(db, part_id) is not None:
            if movement.movement_type == StockMovementType.OUTGOING:
                logger.warning("Rejected outgoing movement of %s for part %s", n, part_id)
                raise InsufficientStock(f"Insufficient stock: requested {n}")
            logger.warning("Rejected incoming movement of %s for part %s: over capacity", n, part_id)
            raise ValidationFailure(f"Incoming movement of {n} would exceed {MAX_QUANTITY}")
        raise NotFound("Warehouse entry not found")
    await db.commit()
    logger.info(
        "Stock %s of %s for part %s -> qty=%s",
        movement.movement_type.value, n, part_id, row["quantity"],
    )
    return dict(row)


async def update(db: AsyncSession, entry_id: UUID, payload: WarehouseEntryUpdate) -> dict:
    """Direct field edit. Only fields present in the request are written."""
    data = payload.model_dump(exclude_unset=True)
    for key in ("quantity", "min_stock_level", "max_stock_level"):
        if key in data and data[key] is None:
            data.pop(key)

    tbl = WarehouseEntry.__table__
    stmt = (
        sql_update(tbl)
        .where(tbl.c.id == entry_id)
        .values(**data, updated_at=func.now())
        .returning(*tbl.c)
    )
    row = (await db.execute(stmt)).mappings().first()
    if row is None:
        await db.rollback()
        raise NotFound("Warehouse entry not found")
    await db.commit()
    logger.info("Updated warehouse entry %s (%s)", entry_id, ", ".join(sorted(data)) or "no fields")
    return dict(row)


async def delete(db: AsyncSession, entry_id: UUID) -> bool:
    res = await db.execute(sql_delete(WarehouseEntry).where(WarehouseEntry.id == entry_id))
    await db.commit()
    deleted = (res.rowcount or 0) > 0
    if deleted:
        logger.info("Deleted warehouse entry %s", entry_id)
    return deleted
