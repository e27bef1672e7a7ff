import enum
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from db.warehouse import MAX_QUANTITY


class StockMovementType(str, enum.Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"
    ADJUSTMENT = "adjustment"


def _strip_location(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class WarehouseEntryCreate(BaseModel):
    part_id: UUID
    quantity: int = Field(ge=0, le=MAX_QUANTITY)
    min_stock_level: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    max_stock_level: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    location: Optional[str] = None

    @field_validator("location")
    @classmethod
    def _location(cls, v: Optional[str]) -> Optional[str]:
        return _strip_location(v)


class WarehouseEntryUpdate(BaseModel):
    quantity: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    min_stock_level: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    max_stock_level: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    location: Optional[str] = None

    @field_validator("location")
    @classmethod
    def _location(cls, v: Optional[str]) -> Optional[str]:
        return _strip_location(v)


class StockMovement(BaseModel):
    quantity: int = Field(ge=1, le=MAX_QUANTITY)
    movement_type: StockMovementType


class WarehouseEntryRead(BaseModel):
    id: UUID
    part_id: UUID
    quantity: int
    min_stock_level: int
    max_stock_level: int
    location: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WarehouseEntryWithPart(WarehouseEntryRead):
    part_article: str
    part_name: str


class InventoryValue(BaseModel):
    total_value: float
