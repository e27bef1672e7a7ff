from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PartCreate(BaseModel):
    article: str
    name: str
    brand_id: Optional[UUID] = None
    car_model_id: Optional[UUID] = None
    purchase_price: float = Field(ge=0)
    sale_price: float = Field(ge=0)
    compatible_vins: List[str] = []

    @field_validator("article", "name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class PartRead(BaseModel):
    id: UUID
    article: str
    name: str
    brand_id: Optional[UUID] = None
    car_model_id: Optional[UUID] = None
    purchase_price: float
    sale_price: float
    compatible_vins: List[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
