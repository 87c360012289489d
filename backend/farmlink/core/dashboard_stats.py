"""Dashboard Stats — pure summary figures for the farmer and buyer dashboards.

Invariants:
    - Inputs are already-loaded listings and orders (no IO, no DB)
    - Returns a flat dict of counts (int) and money totals (revenue, total_spent) as Decimal
    - Never raises: empty inputs yield zeros

Design Decisions:
    - Pure functions, not store queries: the dashboards reuse rows the views already loaded
    - Revenue counts completed orders only; spend excludes declined and cancelled orders
"""

from decimal import Decimal
from typing import Iterable, Sequence

from farmlink.core.domain_types import ListingStatus, OrderStatus
from farmlink.core.repository_protocols import OrderLike


def group_by_status(orders: Iterable[OrderLike]) -> dict[str, list]:
    """Bucket orders by status value, preserving input order within a bucket."""
    groups: dict[str, list] = {status.value: [] for status in OrderStatus}
    for order in orders:
        groups.setdefault(OrderStatus(order.status).value, []).append(order)
    return groups


def compute_farmer_stats(listings: Sequence, orders: Sequence[OrderLike]) -> dict:
    """Farmer dashboard figures. Pure, no IO."""
    completed = [o for o in orders if o.status == OrderStatus.COMPLETED]
    return {
        "available_listings": sum(
            1 for listing in listings if listing.status == ListingStatus.AVAILABLE
        ),
        "total_listings": len(listings),
        "total_orders": len(orders),
        "pending_orders": sum(1 for o in orders if o.status == OrderStatus.PENDING),
        "completed_orders": len(completed),
        "revenue": sum((Decimal(o.total_price) for o in completed), Decimal("0")),
    }


def compute_buyer_stats(orders: Sequence[OrderLike]) -> dict:
    """Buyer dashboard figures. Pure, no IO."""
    spent_on = [
        o for o in orders
        if o.status not in (OrderStatus.DECLINED, OrderStatus.CANCELLED)
    ]
    return {
        "total_orders": len(orders),
        "pending_orders": sum(1 for o in orders if o.status == OrderStatus.PENDING),
        "total_spent": sum((Decimal(o.total_price) for o in spent_on), Decimal("0")),
    }
