"""Order Queries — read-only order views and dashboard figures.

Invariants:
    - No writes; every business rule lives in the order workflow
    - Orders come back newest first with listing and counterparty profiles attached
"""

import logging

from farmlink.core.dashboard_stats import (
    compute_buyer_stats,
    compute_farmer_stats,
    group_by_status,
)
from farmlink.core.domain_types import ProfileId
from farmlink.core.repository_protocols import MarketplaceStore
from farmlink.schemas.marketplace import OrderDetails

logger = logging.getLogger(__name__)


class OrderQueries:
    """Incoming orders for sellers, order history for buyers."""

    def __init__(self, store: MarketplaceStore):
        self.store = store

    async def incoming_orders(self, seller_id: ProfileId) -> list[OrderDetails]:
        async with self.store.transaction() as tx:
            return await tx.list_order_details(seller_id=seller_id)

    async def buyer_orders(self, buyer_id: ProfileId) -> list[OrderDetails]:
        async with self.store.transaction() as tx:
            return await tx.list_order_details(buyer_id=buyer_id)

    async def incoming_by_status(self, seller_id: ProfileId) -> dict[str, list[OrderDetails]]:
        return group_by_status(await self.incoming_orders(seller_id))

    async def farmer_dashboard(self, farmer_id: ProfileId) -> dict:
        async with self.store.transaction() as tx:
            listings = await tx.list_listings(farmer_id=farmer_id)
            orders = await tx.list_order_details(seller_id=farmer_id)
        return compute_farmer_stats(listings, orders)

    async def buyer_dashboard(self, buyer_id: ProfileId) -> dict:
        return compute_buyer_stats(await self.buyer_orders(buyer_id))
