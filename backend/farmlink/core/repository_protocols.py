"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Conditional writes report whether a row matched; they never raise on a miss

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves;
      the shell orchestrates the async calls around the pure logic
    - One transaction() entry point: callers never know whether the store commits
      server-side as a unit (atomic=True) or write by write (atomic=False)
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime
from decimal import Decimal
from typing import Any, Awaitable, Callable, Protocol

from farmlink.core.domain_types import ListingId, ListingStatus, OrderId, ProfileId


class ListingLike(Protocol):
    """Structural contract for listings passed to pure catalog functions."""
    name: str
    description: str
    quantity: int
    price: Decimal
    created_at: datetime


class OrderLike(Protocol):
    """Structural contract for orders passed to pure statistics functions."""
    status: str
    total_price: Decimal


class StoreTransaction(Protocol):
    """Operations available inside one logical store transaction."""
    async def get_profile(self, profile_id: ProfileId) -> Any | None: ...
    async def insert_profile(self, data: dict) -> Any: ...
    async def get_listing(self, listing_id: ListingId) -> Any | None: ...
    async def list_listings(
        self,
        status: ListingStatus | None = None,
        farmer_id: ProfileId | None = None,
        with_farmer: bool = False,
    ) -> list: ...
    async def insert_listing(self, data: dict) -> Any: ...
    async def update_listing_if(
        self, listing_id: ListingId, values: dict, expected: dict,
    ) -> bool: ...
    async def get_order(self, order_id: OrderId) -> Any | None: ...
    async def insert_order(self, data: dict) -> Any: ...
    async def update_order_if(
        self, order_id: OrderId, values: dict, expected: dict,
    ) -> bool: ...
    async def list_order_details(
        self, buyer_id: ProfileId | None = None, seller_id: ProfileId | None = None,
    ) -> list: ...


class MarketplaceStore(Protocol):
    """Contract for the remote data store: implemented by shell."""
    atomic: bool

    def transaction(self) -> AbstractAsyncContextManager[StoreTransaction]: ...


class AuthSubscription(Protocol):
    """Handle returned by AuthGateway.subscribe."""
    def unsubscribe(self) -> None: ...


AuthListener = Callable[[Any], Awaitable[None]]


class AuthGateway(Protocol):
    """Contract for the remote auth subsystem: implemented by shell."""
    async def sign_up(self, email: str, password: str) -> Any: ...
    async def sign_in(self, email: str, password: str) -> Any: ...
    async def sign_out(self) -> None: ...
    async def get_session(self) -> Any | None: ...
    def subscribe(self, listener: AuthListener) -> AuthSubscription: ...


class IdentityStorage(Protocol):
    """Contract for durable local storage of the cached identity."""
    def load(self) -> Any | None: ...
    def save(self, profile: Any | None) -> None: ...
