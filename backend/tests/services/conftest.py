"""Service test fixtures — in-memory store, fake auth, seeded profiles.

Invariants:
    - Every test gets a fresh InMemoryStore with one farmer, one buyer and one listing
    - The seeded listing is the worked example: 10 units at 5 per unit

Design Decisions:
    - Fakes over the SQL store: interleaving and failure injection are explicit,
      and SQLite in-memory shares one connection so it cannot race
"""

import pytest

from farmlink.core.domain_types import UserRole
from farmlink.services.catalog_service import CatalogService
from farmlink.services.order_workflow import OrderWorkflow
from tests.services.fake_store import (
    FakeAuthGateway,
    InMemoryStore,
    MemoryIdentityStorage,
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def farmer(store):
    return store.add_profile(UserRole.FARMER, "Fern Farmer")


@pytest.fixture
def buyer(store):
    return store.add_profile(UserRole.BUYER, "Bea Buyer")


@pytest.fixture
def other_buyer(store):
    return store.add_profile(UserRole.BUYER, "Otto Buyer")


@pytest.fixture
def listing(store, farmer):
    return store.add_listing(farmer, "Tomatoes", quantity=10, price="5")


@pytest.fixture
def catalog(store):
    return CatalogService(store)


@pytest.fixture
def workflow(store, catalog):
    return OrderWorkflow(store, catalog=catalog)


@pytest.fixture
def fake_auth():
    return FakeAuthGateway()


@pytest.fixture
def memory_storage():
    return MemoryIdentityStorage()
