"""Stock Arithmetic — pure rules for decrementing listing stock and pricing orders.

Invariants:
    - Listing quantity never goes negative
    - status is SOLD iff the new quantity is 0
    - Order quantity is a positive integer
    - total_price = quantity * unit price, computed once from the re-read listing
"""

from dataclasses import dataclass
from decimal import Decimal

from farmlink.core.domain_types import ListingStatus
from farmlink.core.errors import InsufficientStockError, ValidationError


@dataclass(frozen=True)
class StockChange:
    """Planned listing write: the conditional update's new values and guard."""
    previous_quantity: int
    new_quantity: int

    @property
    def new_status(self) -> ListingStatus:
        return status_for_quantity(self.new_quantity)

    def values(self) -> dict:
        return {"quantity": self.new_quantity, "status": self.new_status.value}


def status_for_quantity(quantity: int) -> ListingStatus:
    return ListingStatus.SOLD if quantity == 0 else ListingStatus.AVAILABLE


def validate_order_quantity(quantity: object) -> int:
    """Accept only positive integers (bools excluded)."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be a whole number.", "quantity")
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero.", "quantity")
    return quantity


def plan_decrement(available: int, requested: int) -> StockChange:
    """Plan taking requested units out of available stock.

    Raises InsufficientStockError when the result would be negative.
    """
    if requested > available:
        raise InsufficientStockError(available=available, requested=requested)
    return StockChange(previous_quantity=available, new_quantity=available - requested)


def order_total(unit_price: Decimal, quantity: int) -> Decimal:
    return Decimal(unit_price) * quantity
