"""Order ORM — a buyer's purchase of one listing.

Invariants:
    - quantity > 0 (CHECK constraint)
    - total_price written once at creation, never recomputed
    - seller_id is a copy of produce.farmer_id taken at creation
    - status transitions: pending -> accepted | declined | cancelled; accepted -> completed | cancelled

Design Decisions:
    - Three foreign keys to profiles/produce, joined explicitly for display;
      lazy="raise" so no query ever lazy-loads inside the event loop
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from farmlink.db.base import Base


class Order(Base):
    """Order entity."""
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    produce_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("produce.id"), nullable=False, index=True,
    )
    buyer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    produce: Mapped["Produce"] = relationship("Produce", lazy="raise")
    buyer: Mapped["Profile"] = relationship(
        "Profile", foreign_keys=[buyer_id], lazy="raise",
    )
    seller: Mapped["Profile"] = relationship(
        "Profile", foreign_keys=[seller_id], lazy="raise",
    )
