"""Order Workflow over SQL — the worked example end to end on SQLite.

Invariants:
    - Creation and completion commit listing and order writes together
    - A rejected transition leaves both rows untouched
"""

from decimal import Decimal

import pytest

from farmlink.core.domain_types import ListingStatus, OrderStatus
from farmlink.core.errors import (
    InsufficientStockError,
    InvalidTransitionError,
    NoLongerAvailableError,
)
from farmlink.services.catalog_service import CatalogService
from farmlink.services.order_queries import OrderQueries
from farmlink.services.order_workflow import OrderWorkflow


@pytest.fixture
def workflow(sql_store):
    return OrderWorkflow(sql_store, catalog=CatalogService(sql_store))


async def _quantity(sql_store, listing_id):
    async with sql_store.transaction() as tx:
        row = await tx.get_listing(listing_id)
    return row.quantity, row.status


async def test_worked_example_on_sql(sql_store, workflow, farmer, buyer, listing):
    order = await workflow.create_order(buyer, listing.id, 3)
    assert order.total_price == Decimal("15")
    assert await _quantity(sql_store, listing.id) == (7, ListingStatus.AVAILABLE)

    await workflow.accept(farmer, order.id)
    await workflow.complete(farmer, order.id)
    assert await _quantity(sql_store, listing.id) == (4, ListingStatus.AVAILABLE)

    await workflow.create_order(buyer, listing.id, 4)
    assert await _quantity(sql_store, listing.id) == (0, ListingStatus.SOLD)

    with pytest.raises((NoLongerAvailableError, InsufficientStockError)):
        await workflow.create_order(buyer, listing.id, 1)

    stats = await OrderQueries(sql_store).farmer_dashboard(farmer.id)
    assert stats["completed_orders"] == 1
    assert stats["revenue"] == Decimal("15")
    assert stats["available_listings"] == 0


async def test_rejected_transition_writes_nothing(sql_store, workflow, farmer, buyer, listing):
    order = await workflow.create_order(buyer, listing.id, 2)
    with pytest.raises(InvalidTransitionError):
        await workflow.complete(farmer, order.id)

    async with sql_store.transaction() as tx:
        row = await tx.get_order(order.id)
    assert row.status == OrderStatus.PENDING
    assert await _quantity(sql_store, listing.id) == (8, ListingStatus.AVAILABLE)


async def test_insufficient_stock_on_sql(sql_store, workflow, buyer, listing):
    with pytest.raises(InsufficientStockError):
        await workflow.create_order(buyer, listing.id, 50)
    assert await _quantity(sql_store, listing.id) == (10, ListingStatus.AVAILABLE)
