"""
Stock ledger storage: one row per part.

``quantity`` is guarded twice: movements are single conditional UPDATEs, and
the table refuses negative values outright.
"""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .database import Base

# upper bound of the INTEGER columns below
MAX_QUANTITY = 2**31 - 1


class WarehouseEntry(Base):
    __tablename__ = "warehouse"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_warehouse_quantity_non_negative"),
        CheckConstraint("min_stock_level >= 0", name="chk_warehouse_min_non_negative"),
        CheckConstraint("max_stock_level >= 0", name="chk_warehouse_max_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    part_id = Column(
        UUID(as_uuid=True),
        ForeignKey("parts.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=0)
    max_stock_level = Column(Integer, nullable=False, default=100)
    location = Column(Text, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
