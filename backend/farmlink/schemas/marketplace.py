"""Marketplace Schemas — Profile, Listing, Order and their joined read shapes.

Invariants:
    - Listing.quantity >= 0, Listing.price >= 0
    - Order.quantity > 0; Order.total_price frozen at creation
    - Row models accept ORM objects (from_attributes) and plain dicts alike

Design Decisions:
    - Decimal for money: total_price = quantity * price must not drift
    - Joined shapes (ListingWithFarmer, OrderDetails) kept separate from row shapes:
      enrichment is for display only, never written back
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from farmlink.core.domain_types import ListingStatus, OrderStatus, UserRole


class RowSchema(BaseModel):
    """Base for rows read from the store."""
    model_config = ConfigDict(from_attributes=True)


# --- Profiles -----------------------------------------------------------------

class Profile(RowSchema):
    """Identity record: one per authenticated account."""
    id: UUID
    name: str
    email: str
    phone: str | None = None
    role: UserRole
    created_at: datetime


class ProfileCreate(BaseModel):
    """Registration form: validated before any remote call."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    role: UserRole

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


# --- Listings -----------------------------------------------------------------

class Listing(RowSchema):
    """A farmer's produce offering."""
    id: UUID
    farmer_id: UUID
    name: str
    description: str = ""
    quantity: int = Field(ge=0)
    unit: str = "kg"
    price: Decimal = Field(ge=0)
    status: ListingStatus
    created_at: datetime

    @field_validator("description", mode="before")
    @classmethod
    def none_description(cls, v: str | None) -> str:
        return v or ""


class ListingWithFarmer(Listing):
    """Catalog entry: listing enriched with its owner's profile."""
    farmer: Profile | None = None


class ListingCreate(BaseModel):
    """New listing form."""
    name: str = Field(min_length=1, max_length=100)
    description: str = Field("", max_length=2000)
    quantity: int = Field(ge=0)
    unit: str = Field("kg", min_length=1, max_length=20)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


# --- Orders -------------------------------------------------------------------

class Order(RowSchema):
    """A buyer's purchase of a quantity of one listing."""
    id: UUID
    produce_id: UUID
    buyer_id: UUID
    seller_id: UUID
    quantity: int = Field(gt=0)
    total_price: Decimal = Field(ge=0)
    status: OrderStatus
    created_at: datetime


class OrderDetails(Order):
    """Order joined with its listing and both counterparties, for display."""
    produce: Listing | None = None
    buyer: Profile | None = None
    seller: Profile | None = None
