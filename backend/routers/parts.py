from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from core.errors import NotFound
from db.database import get_async_session
from schemas.parts import PartCreate, PartRead
from services import catalog

router = APIRouter()


@router.get("/", response_model=List[PartRead])
async def list_parts(db: AsyncSession = Depends(get_async_session)):
    return await catalog.list_parts(db)


@router.post("/", response_model=PartRead, status_code=status.HTTP_201_CREATED)
async def create_part(payload: PartCreate, db: AsyncSession = Depends(get_async_session)):
    return await catalog.create_part(db, payload)


@router.get("/{part_id}", response_model=PartRead)
async def get_part(part_id: UUID, db: AsyncSession = Depends(get_async_session)):
    part = await catalog.get_part(db, part_id)
    if part is None:
        raise NotFound("Part not found")
    return part
