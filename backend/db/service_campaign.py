import enum
import uuid
from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.sql import func

from .database import Base


class CampaignStatus(str, enum.Enum):
    """
    Campaign lifecycle status, stored as lowercase text.

    Loading a row whose stored value is none of these raises LookupError;
    there is no fallback status.
    """
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def _missing_(cls, value):
        # Accept "Active" / "ACTIVE" from clients; storage stays lowercase.
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class ServiceCampaign(Base):
    __tablename__ = "service_campaigns"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    article = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    brand_id = Column(UUID(as_uuid=True), ForeignKey("brands.id"), nullable=False, index=True)
    car_model_id = Column(UUID(as_uuid=True), ForeignKey("car_models.id"), nullable=False, index=True)

    # empty = every VIN of the brand/model
    target_vins = Column(ARRAY(String), nullable=False, default=list, server_default="{}")
    required_parts = Column(ARRAY(UUID(as_uuid=True)), nullable=False, default=list, server_default="{}")
    required_works = Column(ARRAY(UUID(as_uuid=True)), nullable=False, default=list, server_default="{}")

    is_mandatory = Column(Boolean, nullable=False, default=False)
    # campaign-global flag, independent of per-vehicle completion
    is_completed = Column(Boolean, nullable=False, default=False)
    status = Column(
        SQLEnum(
            CampaignStatus,
            name="service_campaign_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
            length=20,
        ),
        nullable=False,
        default=CampaignStatus.ACTIVE,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
