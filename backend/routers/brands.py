from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from core.errors import NotFound
from db.database import get_async_session
from schemas.brands import BrandCreate, BrandRead, CarModelCreate, CarModelRead
from services import catalog

router = APIRouter()


@router.get("/", response_model=List[BrandRead])
async def list_brands(db: AsyncSession = Depends(get_async_session)):
    brands = await catalog.list_brands(db)
    return [BrandRead(**b.to_schema) for b in brands]


@router.post("/", response_model=BrandRead, status_code=status.HTTP_201_CREATED)
async def create_brand(payload: BrandCreate, db: AsyncSession = Depends(get_async_session)):
    return BrandRead(**await catalog.create_brand(db, payload))


@router.get("/{brand_id}", response_model=BrandRead)
async def get_brand(brand_id: UUID, db: AsyncSession = Depends(get_async_session)):
    b = await catalog.get_brand(db, brand_id)
    if b is None:
        raise NotFound("Brand not found")
    return BrandRead(**b.to_schema)


@router.get("/{brand_id}/models", response_model=List[CarModelRead])
async def list_models(brand_id: UUID, db: AsyncSession = Depends(get_async_session)):
    models = await catalog.list_car_models(db, brand_id)
    return [CarModelRead(**m.to_schema) for m in models]


@router.post("/{brand_id}/models", response_model=CarModelRead, status_code=status.HTTP_201_CREATED)
async def create_model(
    brand_id: UUID,
    payload: CarModelCreate,
    db: AsyncSession = Depends(get_async_session),
):
    return CarModelRead(**await catalog.create_car_model(db, brand_id, payload))
