from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.errors import NotFound
from db.car import CarStatus
from db.database import get_async_session
from schemas.cars import CarCreate, CarRead
from schemas.service_campaigns import ServiceCampaignRead
from services import catalog, completion, eligibility

router = APIRouter()


@router.get("/", response_model=List[CarRead])
async def list_cars(
    status_filter: Optional[CarStatus] = Query(default=None, alias="status"),
    db: AsyncSession = Depends(get_async_session),
):
    return await catalog.list_vehicles(db, status_filter)


@router.post("/", response_model=CarRead, status_code=status.HTTP_201_CREATED)
async def create_car(payload: CarCreate, db: AsyncSession = Depends(get_async_session)):
    return await catalog.create_vehicle(db, payload)


@router.get("/vin/{vin}", response_model=CarRead)
async def get_car_by_vin(vin: str, db: AsyncSession = Depends(get_async_session)):
    car = await catalog.find_vehicle_by_vin(db, vin)
    if car is None:
        raise NotFound("Car not found")
    return car


@router.get("/by-completed-campaign/{campaign_id}", response_model=List[CarRead])
async def cars_by_completed_campaign(campaign_id: UUID, db: AsyncSession = Depends(get_async_session)):
    return await completion.vehicles_by_completed_campaign(db, campaign_id)


@router.get("/{car_id}", response_model=CarRead)
async def get_car(car_id: UUID, db: AsyncSession = Depends(get_async_session)):
    car = await catalog.get_vehicle(db, car_id)
    if car is None:
        raise NotFound("Car not found")
    return car


@router.get("/{car_id}/pending-campaigns", response_model=List[ServiceCampaignRead])
async def pending_campaigns(car_id: UUID, db: AsyncSession = Depends(get_async_session)):
    return await eligibility.pending_for(db, car_id)


@router.post("/{car_id}/campaigns/{campaign_id}", response_model=CarRead)
async def mark_campaign_completed(
    car_id: UUID,
    campaign_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    car = await completion.mark_completed(db, car_id, campaign_id)
    if car is None:
        raise NotFound("Vehicle not found or campaign already completed")
    return car


@router.delete("/{car_id}/campaigns/{campaign_id}", response_model=CarRead)
async def unmark_campaign_completed(
    car_id: UUID,
    campaign_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    car = await completion.unmark_completed(db, car_id, campaign_id)
    if car is None:
        raise NotFound("Car not found")
    return car


@router.delete("/{car_id}/campaigns", response_model=CarRead)
async def clear_completed_campaigns(car_id: UUID, db: AsyncSession = Depends(get_async_session)):
    car = await completion.clear_completed(db, car_id)
    if car is None:
        raise NotFound("Car not found")
    return car
