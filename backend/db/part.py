import uuid
from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, String
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.sql import func

from .database import Base


class Part(Base):
    """Part catalog row. The stock ledger reads only id, article, name and purchase_price."""
    __tablename__ = "parts"
    __table_args__ = (
        CheckConstraint("purchase_price >= 0", name="chk_parts_purchase_price_non_negative"),
        CheckConstraint("sale_price >= 0", name="chk_parts_sale_price_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    article = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)

    brand_id = Column(UUID(as_uuid=True), ForeignKey("brands.id", ondelete="SET NULL"), nullable=True, index=True)
    car_model_id = Column(UUID(as_uuid=True), ForeignKey("car_models.id", ondelete="SET NULL"), nullable=True, index=True)

    purchase_price = Column(Float, nullable=False)
    sale_price = Column(Float, nullable=False)
    compatible_vins = Column(ARRAY(String), nullable=False, default=list, server_default="{}")

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
