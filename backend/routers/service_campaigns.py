from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from core.errors import NotFound
from db.database import get_async_session
from db.service_campaign import CampaignStatus
from schemas.service_campaigns import (
    CampaignStatusUpdate,
    ServiceCampaignCreate,
    ServiceCampaignRead,
    ServiceCampaignUpdate,
)
from services import campaigns

router = APIRouter()

_NOT_FOUND = "Service campaign not found"


@router.get("/", response_model=List[ServiceCampaignRead])
async def list_campaigns(
    brand_id: Optional[UUID] = None,
    car_model_id: Optional[UUID] = None,
    status_filter: Optional[CampaignStatus] = Query(default=None, alias="status"),
    is_mandatory: Optional[bool] = None,
    is_completed: Optional[bool] = None,
    vin: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    return await campaigns.list_campaigns(
        db,
        brand_id=brand_id,
        car_model_id=car_model_id,
        status=status_filter,
        is_mandatory=is_mandatory,
        is_completed=is_completed,
        vin=vin,
    )


@router.post("/", response_model=ServiceCampaignRead, status_code=status.HTTP_201_CREATED)
async def create_campaign(payload: ServiceCampaignCreate, db: AsyncSession = Depends(get_async_session)):
    return await campaigns.create_campaign(db, payload)


@router.get("/article/{article}", response_model=ServiceCampaignRead)
async def get_campaign_by_article(article: str, db: AsyncSession = Depends(get_async_session)):
    c = await campaigns.get_campaign_by_article(db, article)
    if c is None:
        raise NotFound(_NOT_FOUND)
    return c


@router.get("/{campaign_id}", response_model=ServiceCampaignRead)
async def get_campaign(campaign_id: UUID, db: AsyncSession = Depends(get_async_session)):
    c = await campaigns.get_campaign(db, campaign_id)
    if c is None:
        raise NotFound(_NOT_FOUND)
    return c


@router.put("/{campaign_id}", response_model=ServiceCampaignRead)
async def update_campaign(
    campaign_id: UUID,
    payload: ServiceCampaignUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    c = await campaigns.update_campaign(db, campaign_id, payload)
    if c is None:
        raise NotFound(_NOT_FOUND)
    return c


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_campaign(campaign_id: UUID, db: AsyncSession = Depends(get_async_session)):
    if not await campaigns.delete_campaign(db, campaign_id):
        raise NotFound(_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{campaign_id}/status", response_model=ServiceCampaignRead)
async def set_campaign_status(
    campaign_id: UUID,
    payload: CampaignStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    c = await campaigns.set_status(db, campaign_id, payload.status)
    if c is None:
        raise NotFound(_NOT_FOUND)
    return c


@router.patch("/{campaign_id}/complete", response_model=ServiceCampaignRead)
async def complete_campaign(campaign_id: UUID, db: AsyncSession = Depends(get_async_session)):
    c = await campaigns.mark_campaign_completed(db, campaign_id)
    if c is None:
        raise NotFound(_NOT_FOUND)
    return c


@router.patch("/{campaign_id}/pending", response_model=ServiceCampaignRead)
async def reopen_campaign(campaign_id: UUID, db: AsyncSession = Depends(get_async_session)):
    c = await campaigns.mark_campaign_pending(db, campaign_id)
    if c is None:
        raise NotFound(_NOT_FOUND)
    return c
