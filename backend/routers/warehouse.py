from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from core.errors import NotFound
from db.database import get_async_session
from schemas.warehouse import (
    InventoryValue,
    StockMovement,
    WarehouseEntryCreate,
    WarehouseEntryRead,
    WarehouseEntryUpdate,
    WarehouseEntryWithPart,
)
from services import stock_ledger

router = APIRouter()

# Static paths first: "/low-stock" must not be parsed as an entry id.


@router.get("/", response_model=List[WarehouseEntryWithPart])
async def list_entries(db: AsyncSession = Depends(get_async_session)):
    return await stock_ledger.list_entries(db)


@router.post("/", response_model=WarehouseEntryRead, status_code=status.HTTP_201_CREATED)
async def create_entry(payload: WarehouseEntryCreate, db: AsyncSession = Depends(get_async_session)):
    return await stock_ledger.create(db, payload)


@router.get("/low-stock", response_model=List[WarehouseEntryWithPart])
async def low_stock(db: AsyncSession = Depends(get_async_session)):
    return await stock_ledger.low_stock(db)


@router.get("/total-value", response_model=InventoryValue)
async def total_value(db: AsyncSession = Depends(get_async_session)):
    return InventoryValue(total_value=await stock_ledger.total_value(db))


@router.get("/part/{part_id}", response_model=WarehouseEntryRead)
async def get_entry_by_part(part_id: UUID, db: AsyncSession = Depends(get_async_session)):
    entry = await stock_ledger.get_by_part(db, part_id)
    if entry is None:
        raise NotFound("Warehouse entry not found")
    return entry


@router.get("/article/{article}", response_model=WarehouseEntryWithPart)
async def get_entry_by_article(article: str, db: AsyncSession = Depends(get_async_session)):
    entry = await stock_ledger.get_by_article(db, article)
    if entry is None:
        raise NotFound("Warehouse entry not found")
    return entry


@router.get("/location/{location}", response_model=List[WarehouseEntryWithPart])
async def list_by_location(location: str, db: AsyncSession = Depends(get_async_session)):
    return await stock_ledger.list_by_location(db, location)


@router.get("/{entry_id}", response_model=WarehouseEntryRead)
async def get_entry(entry_id: UUID, db: AsyncSession = Depends(get_async_session)):
    entry = await stock_ledger.get(db, entry_id)
    if entry is None:
        raise NotFound("Warehouse entry not found")
    return entry


@router.put("/{entry_id}", response_model=WarehouseEntryRead)
async def update_entry(
    entry_id: UUID,
    payload: WarehouseEntryUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    return await stock_ledger.update(db, entry_id, payload)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: UUID, db: AsyncSession = Depends(get_async_session)):
    if not await stock_ledger.delete(db, entry_id):
        raise NotFound("Warehouse entry not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{part_id}/stock", response_model=WarehouseEntryRead)
async def apply_movement(
    part_id: UUID,
    movement: StockMovement,
    db: AsyncSession = Depends(get_async_session),
):
    return await stock_ledger.apply_movement(db, part_id, movement)
