from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from db.service_campaign import CampaignStatus


def _normalize_vins(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return None
    out: List[str] = []
    for vin in v:
        vin = (vin or "").strip().upper()
        if vin and vin not in out:
            out.append(vin)
    return out


def _lower_status(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


class ServiceCampaignCreate(BaseModel):
    article: str
    name: str
    description: Optional[str] = None
    brand_id: UUID
    car_model_id: UUID
    target_vins: List[str] = []
    required_parts: List[UUID] = []
    required_works: List[UUID] = []
    is_mandatory: bool = False

    @field_validator("article", "name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("target_vins")
    @classmethod
    def _vins(cls, v: List[str]) -> List[str]:
        return _normalize_vins(v)


class ServiceCampaignUpdate(BaseModel):
    article: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    brand_id: Optional[UUID] = None
    car_model_id: Optional[UUID] = None
    target_vins: Optional[List[str]] = None
    required_parts: Optional[List[UUID]] = None
    required_works: Optional[List[UUID]] = None
    is_mandatory: Optional[bool] = None
    is_completed: Optional[bool] = None
    status: Optional[CampaignStatus] = None

    @field_validator("article", "name")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("target_vins")
    @classmethod
    def _vins(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _normalize_vins(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return _lower_status(v)


class CampaignStatusUpdate(BaseModel):
    status: CampaignStatus

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v):
        return _lower_status(v)


class ServiceCampaignRead(BaseModel):
    id: UUID
    article: str
    name: str
    description: Optional[str] = None
    brand_id: UUID
    car_model_id: UUID
    target_vins: List[str] = []
    required_parts: List[UUID] = []
    required_works: List[UUID] = []
    is_mandatory: bool
    is_completed: bool
    status: CampaignStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
