from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, field_validator


class BrandCreate(BaseModel):
    name: str
    country: str

    @field_validator("name", "country")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class BrandRead(BaseModel):
    id: UUID
    name: str
    country: str
    created_at: datetime
    updated_at: datetime


class CarModelCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class CarModelRead(BaseModel):
    id: UUID
    name: str
    brand_id: UUID
    created_at: datetime
    updated_at: datetime
