"""Produce ORM — a farmer's listing with stock and unit price.

Invariants:
    - quantity >= 0 and price >= 0 (CHECK constraints)
    - status 'sold' iff quantity reached 0 on the last stock write
    - Never deleted; soft state via status only

Design Decisions:
    - Integer quantity: orders are placed in whole units
    - Numeric(10, 2) price: exact money arithmetic for total_price
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from farmlink.db.base import Base


class Produce(Base):
    """Produce listing: mutated only by its farmer or by the order workflow."""
    __tablename__ = "produce"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_produce_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_produce_price_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="available", index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    farmer: Mapped["Profile"] = relationship("Profile", lazy="raise")
