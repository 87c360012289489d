"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ProfileId, ListingId, OrderId wrap UUIDs: never use bare UUID in domain logic
    - All valid states encoded as Enums: no raw string matching
    - One order vocabulary: pending, accepted, declined, completed, cancelled

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to the raw column values and serialize to JSON as-is
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ProfileId = NewType("ProfileId", UUID)
ListingId = NewType("ListingId", UUID)
OrderId = NewType("OrderId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class UserRole(str, Enum):
    """Marketplace roles: fixed at registration."""
    FARMER = "farmer"
    BUYER = "buyer"


class ListingStatus(str, Enum):
    """Produce listing states: SOLD iff quantity reached 0."""
    AVAILABLE = "available"
    SOLD = "sold"


class OrderStatus(str, Enum):
    """Order lifecycle states: maps to DB `status` column."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_ORDER_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.DECLINED,
    OrderStatus.CANCELLED,
})


class OrderActor(str, Enum):
    """Which side of an order is acting on it."""
    BUYER = "buyer"
    SELLER = "seller"


class CatalogSort(str, Enum):
    """Catalog view modes: AVAILABLE_ONLY filters rather than orders."""
    NONE = "none"
    PRICE_ASCENDING = "price-ascending"
    PRICE_DESCENDING = "price-descending"
    AVAILABLE_ONLY = "available-only"


class AuthEventType(str, Enum):
    """Auth change notifications delivered to subscribers."""
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
