"""Order Queries — verifies order lists and dashboard figures."""

from decimal import Decimal

import pytest

from farmlink.services.order_queries import OrderQueries


@pytest.fixture
def queries(store):
    return OrderQueries(store)


@pytest.fixture
async def history(workflow, farmer, buyer, other_buyer, listing):
    """Three orders on the seeded listing: completed, declined, pending."""
    first = await workflow.create_order(buyer, listing.id, 2)
    await workflow.accept(farmer, first.id)
    await workflow.complete(farmer, first.id)
    second = await workflow.create_order(other_buyer, listing.id, 1)
    await workflow.decline(farmer, second.id)
    third = await workflow.create_order(buyer, listing.id, 1)
    return first, second, third


async def test_incoming_orders_newest_first_with_details(queries, farmer, buyer, listing, history):
    orders = await queries.incoming_orders(farmer.id)
    assert [o.id for o in orders] == [h.id for h in reversed(history)]
    assert orders[0].produce.id == listing.id
    assert orders[0].buyer == buyer
    assert orders[0].seller == farmer


async def test_buyer_orders_only_their_own(queries, buyer, history):
    orders = await queries.buyer_orders(buyer.id)
    assert {o.id for o in orders} == {history[0].id, history[2].id}


async def test_incoming_by_status(queries, farmer, history):
    groups = await queries.incoming_by_status(farmer.id)
    assert [o.id for o in groups["completed"]] == [history[0].id]
    assert [o.id for o in groups["declined"]] == [history[1].id]
    assert [o.id for o in groups["pending"]] == [history[2].id]
    assert groups["accepted"] == []


async def test_farmer_dashboard(queries, farmer, history):
    stats = await queries.farmer_dashboard(farmer.id)
    assert stats["total_listings"] == 1
    assert stats["available_listings"] == 1
    assert stats["total_orders"] == 3
    assert stats["pending_orders"] == 1
    assert stats["completed_orders"] == 1
    assert stats["revenue"] == Decimal("10")


async def test_buyer_dashboard(queries, buyer, other_buyer, history):
    stats = await queries.buyer_dashboard(buyer.id)
    assert stats == {
        "total_orders": 2,
        "pending_orders": 1,
        "total_spent": Decimal("15"),
    }
    other = await queries.buyer_dashboard(other_buyer.id)
    assert other["total_spent"] == Decimal("0")
