import enum
import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, Enum as SQLEnum, Float, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.sql import func

from .database import Base


class FuelType(str, enum.Enum):
    PETROL = "Petrol"
    DIESEL = "Diesel"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"


class Transmission(str, enum.Enum):
    MANUAL = "Manual"
    AUTOMATIC = "Automatic"
    CVT = "CVT"


class CarStatus(str, enum.Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    SOLD = "Sold"
    MAINTENANCE = "Maintenance"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Car(Base):
    """
    Vehicle record.

    ``completed_service_campaigns`` is a set stored as a UUID array. It is only
    ever changed by single-statement array updates (see services/completion.py),
    never by writing back a copy read into memory.
    """
    __tablename__ = "cars"
    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_cars_price_non_negative"),
        CheckConstraint("mileage >= 0", name="chk_cars_mileage_non_negative"),
        Index("idx_cars_completed_campaigns", "completed_service_campaigns", postgresql_using="gin"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    brand_id = Column(UUID(as_uuid=True), ForeignKey("brands.id"), nullable=False, index=True)
    model_id = Column(UUID(as_uuid=True), ForeignKey("car_models.id"), nullable=False, index=True)

    year = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    mileage = Column(Integer, nullable=False, default=0)
    color = Column(String(50), nullable=False)
    vin = Column(String(17), nullable=False, unique=True, index=True)

    fuel_type = Column(SQLEnum(FuelType, name="fuel_type", native_enum=False, values_callable=_values, length=20), nullable=False)
    transmission = Column(SQLEnum(Transmission, name="transmission", native_enum=False, values_callable=_values, length=20), nullable=False)
    status = Column(
        SQLEnum(CarStatus, name="car_status", native_enum=False, values_callable=_values, length=20),
        nullable=False,
        default=CarStatus.AVAILABLE,
        index=True,
    )

    completed_service_campaigns = Column(
        ARRAY(UUID(as_uuid=True)), nullable=False, default=list, server_default="{}"
    )

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
