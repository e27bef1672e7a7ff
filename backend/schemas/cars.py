from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from db.car import CarStatus, FuelType, Transmission


class CarCreate(BaseModel):
    brand_id: UUID
    model_id: UUID
    year: int = Field(ge=1990, le=2100)
    price: float = Field(ge=0)
    mileage: int = Field(default=0, ge=0)
    color: str
    vin: str
    fuel_type: FuelType
    transmission: Transmission

    @field_validator("vin")
    @classmethod
    def _vin(cls, v: str) -> str:
        v = (v or "").strip().upper()
        if len(v) != 17:
            raise ValueError("VIN must be exactly 17 characters")
        return v

    @field_validator("color")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class CarRead(BaseModel):
    id: UUID
    brand_id: UUID
    model_id: UUID
    year: int
    price: float
    mileage: int
    color: str
    vin: str
    fuel_type: FuelType
    transmission: Transmission
    status: CarStatus
    completed_service_campaigns: List[UUID] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
