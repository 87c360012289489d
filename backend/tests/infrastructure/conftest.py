"""Infrastructure test fixtures — profiles and listings seeded through the SQL store."""

from decimal import Decimal

import pytest

from farmlink.core.domain_types import UserRole
from farmlink.models.auth_account import AuthAccount


async def _seed_profile(db_manager, sql_store, name: str, role: UserRole):
    email = f"{name.lower()}@example.com"
    async with db_manager.session() as db:
        account = AuthAccount(email=email, password_hash="not-a-real-hash")
        db.add(account)
        await db.commit()
    async with sql_store.transaction() as tx:
        return await tx.insert_profile({
            "id": account.id, "name": name, "email": email, "role": role,
        })


@pytest.fixture
async def farmer(db_manager, sql_store):
    return await _seed_profile(db_manager, sql_store, "Fern", UserRole.FARMER)


@pytest.fixture
async def buyer(db_manager, sql_store):
    return await _seed_profile(db_manager, sql_store, "Bea", UserRole.BUYER)


@pytest.fixture
async def other_buyer(db_manager, sql_store):
    return await _seed_profile(db_manager, sql_store, "Otto", UserRole.BUYER)


@pytest.fixture
async def listing(sql_store, farmer):
    async with sql_store.transaction() as tx:
        return await tx.insert_listing({
            "farmer_id": farmer.id,
            "name": "Tomatoes",
            "description": "Heirloom",
            "quantity": 10,
            "unit": "kg",
            "price": Decimal("5.00"),
            "status": "available",
        })
