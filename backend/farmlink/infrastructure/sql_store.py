"""SQL Marketplace Store — the remote data store over async SQLAlchemy.

Invariants:
    - transaction() is one database transaction: commit on clean exit, rollback on any exception
    - Conditional updates filter on every expected column and report rowcount == 1
    - Rows leave this module as pydantic schemas, never as ORM objects
    - Rows that fail schema validation surface as BackendError (no usable payload)

Design Decisions:
    - atomic=True: listing and order writes share one transaction, so creation and
      completion commit as a unit server-side
    - populate_existing on reads: a re-read inside a transaction always reflects
      the conditional updates already issued in it
    - Column whitelists on conditional updates: callers cannot write arbitrary columns
"""

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncGenerator, TypeVar

from pydantic import BaseModel, ValidationError as SchemaValidationError
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from farmlink.core.domain_types import ListingId, ListingStatus, OrderId, ProfileId
from farmlink.core.errors import BackendError
from farmlink.infrastructure.database import DatabaseSessionManager
from farmlink.models.order import Order as OrderModel
from farmlink.models.produce import Produce
from farmlink.models.profile import Profile as ProfileModel
from farmlink.schemas.marketplace import (
    Listing,
    ListingWithFarmer,
    Order,
    OrderDetails,
    Profile,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)

_LISTING_COLUMNS = frozenset({"quantity", "status", "price", "name", "description", "unit"})
_ORDER_COLUMNS = frozenset({"status"})


def _plain(value):
    return value.value if isinstance(value, Enum) else value


def _to_schema(schema: type[S], row) -> S:
    try:
        return schema.model_validate(row)
    except SchemaValidationError as e:
        logger.error(f"Unusable {schema.__name__} payload: {e}")
        raise BackendError(f"unusable {schema.__name__} payload", "decode") from e


def _check_columns(columns, allowed: frozenset, table: str) -> None:
    unknown = set(columns) - allowed
    if unknown:
        raise ValueError(f"Cannot conditionally update {table} columns: {sorted(unknown)}")


class SqlStoreTransaction:
    """Store operations bound to one AsyncSession inside one transaction."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- profiles -------------------------------------------------------------

    async def get_profile(self, profile_id: ProfileId) -> Profile | None:
        result = await self.db.execute(
            select(ProfileModel)
            .where(ProfileModel.id == profile_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_schema(Profile, row) if row else None

    async def insert_profile(self, data: dict) -> Profile:
        row = ProfileModel(**{k: _plain(v) for k, v in data.items()})
        self.db.add(row)
        await self.db.flush()
        return _to_schema(Profile, row)

    # --- listings -------------------------------------------------------------

    async def get_listing(self, listing_id: ListingId) -> Listing | None:
        result = await self.db.execute(
            select(Produce)
            .where(Produce.id == listing_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_schema(Listing, row) if row else None

    async def list_listings(
        self,
        status: ListingStatus | None = None,
        farmer_id: ProfileId | None = None,
        with_farmer: bool = False,
    ) -> list[Listing]:
        query = select(Produce).order_by(Produce.created_at.desc())
        if status is not None:
            query = query.where(Produce.status == _plain(status))
        if farmer_id is not None:
            query = query.where(Produce.farmer_id == farmer_id)
        if with_farmer:
            query = query.options(selectinload(Produce.farmer))

        result = await self.db.execute(query)
        schema = ListingWithFarmer if with_farmer else Listing
        return [_to_schema(schema, row) for row in result.scalars().all()]

    async def insert_listing(self, data: dict) -> Listing:
        row = Produce(**{k: _plain(v) for k, v in data.items()})
        self.db.add(row)
        await self.db.flush()
        return _to_schema(Listing, row)

    async def update_listing_if(
        self, listing_id: ListingId, values: dict, expected: dict,
    ) -> bool:
        _check_columns(values, _LISTING_COLUMNS, "produce")
        _check_columns(expected, _LISTING_COLUMNS, "produce")
        stmt = update(Produce).where(Produce.id == listing_id)
        for column, value in expected.items():
            stmt = stmt.where(getattr(Produce, column) == _plain(value))
        stmt = stmt.values(
            **{k: _plain(v) for k, v in values.items()},
        ).execution_options(synchronize_session=False)

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    # --- orders ---------------------------------------------------------------

    async def get_order(self, order_id: OrderId) -> Order | None:
        result = await self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_schema(Order, row) if row else None

    async def insert_order(self, data: dict) -> Order:
        row = OrderModel(**{k: _plain(v) for k, v in data.items()})
        self.db.add(row)
        await self.db.flush()
        return _to_schema(Order, row)

    async def update_order_if(
        self, order_id: OrderId, values: dict, expected: dict,
    ) -> bool:
        _check_columns(values, _ORDER_COLUMNS, "orders")
        _check_columns(expected, _ORDER_COLUMNS, "orders")
        stmt = update(OrderModel).where(OrderModel.id == order_id)
        for column, value in expected.items():
            stmt = stmt.where(getattr(OrderModel, column) == _plain(value))
        stmt = stmt.values(
            **{k: _plain(v) for k, v in values.items()},
        ).execution_options(synchronize_session=False)

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def list_order_details(
        self, buyer_id: ProfileId | None = None, seller_id: ProfileId | None = None,
    ) -> list[OrderDetails]:
        query = (
            select(OrderModel)
            .options(
                selectinload(OrderModel.produce),
                selectinload(OrderModel.buyer),
                selectinload(OrderModel.seller),
            )
            .order_by(OrderModel.created_at.desc())
        )
        if buyer_id is not None:
            query = query.where(OrderModel.buyer_id == buyer_id)
        if seller_id is not None:
            query = query.where(OrderModel.seller_id == seller_id)

        result = await self.db.execute(query)
        return [_to_schema(OrderDetails, row) for row in result.scalars().all()]


class SqlMarketplaceStore:
    """MarketplaceStore backed by one SQL database."""

    atomic = True

    def __init__(self, db: DatabaseSessionManager):
        self.db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[SqlStoreTransaction, None]:
        async with self.db.session() as session:
            async with session.begin():
                yield SqlStoreTransaction(session)
