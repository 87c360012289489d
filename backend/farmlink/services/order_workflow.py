"""Order Workflow — order creation and status transitions against the remote store.

Invariants:
    - Each operation runs in ONE store transaction (re-read, validate, write)
    - Listing stock is written only through a conditional update guarded on the re-read
      status and quantity; zero rows affected -> ConflictError, never silent success
    - Creation decrements stock before inserting the order; an order is never inserted
      after a failed decrement
    - Completion decrements stock by the order quantity, then writes the order status
    - Non-completion transitions write only the order row
    - A rejected transition performs no writes
    - On a non-atomic store, a failed order write after a successful listing write
      raises PartialFailureError (listing already adjusted; needs reconciliation)
    - All errors propagate to the caller as FarmLinkError subclasses

Design Decisions:
    - Pure rules (core/order_transitions, core/stock) sandwiched between store reads
      and writes: the shell orchestrates IO, the core decides
    - Guard on quantity as well as status: a compare-and-swap on the exact value read,
      so two buyers racing on the same listing cannot both decrement from one read
    - Catalog refreshed on ConflictError before re-raising: the caller's view was stale
"""

import logging

from farmlink.core.domain_types import (
    ListingId,
    ListingStatus,
    OrderId,
    OrderStatus,
    UserRole,
)
from farmlink.core.errors import (
    ConflictError,
    ErrorContext,
    FarmLinkError,
    NoLongerAvailableError,
    PartialFailureError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from farmlink.core.order_transitions import (
    resolve_actor,
    touches_stock,
    validate_transition,
)
from farmlink.core.repository_protocols import MarketplaceStore, StoreTransaction
from farmlink.core.stock import order_total, plan_decrement, validate_order_quantity
from farmlink.schemas.marketplace import Order, Profile

logger = logging.getLogger(__name__)


class OrderWorkflow:
    """The order status state machine, with its stock side effects."""

    def __init__(self, store: MarketplaceStore, catalog=None):
        self.store = store
        self.catalog = catalog

    # --- creation -------------------------------------------------------------

    async def create_order(
        self, buyer: Profile, listing_id: ListingId, quantity: int,
    ) -> Order:
        """Buyer places an order: re-read, check, decrement, insert pending order."""
        quantity = validate_order_quantity(quantity)
        ctx = ErrorContext(listing_id=str(listing_id), profile_id=str(buyer.id))
        if UserRole(buyer.role) != UserRole.BUYER:
            raise PermissionDeniedError("Only buyers can place orders.", ctx)

        try:
            async with self.store.transaction() as tx:
                listing = await tx.get_listing(listing_id)
                if listing is None:
                    raise ResourceNotFoundError("Listing", str(listing_id), ctx)
                if listing.status != ListingStatus.AVAILABLE:
                    raise NoLongerAvailableError(
                        str(listing_id), ListingStatus(listing.status).value, ctx,
                    )

                change = plan_decrement(listing.quantity, quantity)
                decremented = await tx.update_listing_if(
                    listing.id,
                    change.values(),
                    expected={
                        "status": ListingStatus.AVAILABLE.value,
                        "quantity": listing.quantity,
                    },
                )
                if not decremented:
                    raise ConflictError(
                        f"Listing '{listing_id}' changed while ordering", ctx,
                    )

                order_data = {
                    "produce_id": listing.id,
                    "buyer_id": buyer.id,
                    "seller_id": listing.farmer_id,
                    "quantity": quantity,
                    "total_price": order_total(listing.price, quantity),
                    "status": OrderStatus.PENDING.value,
                }
                order = await self._insert_order_after_decrement(tx, order_data, ctx)
        except ConflictError:
            await self._refresh_catalog()
            raise

        logger.info(
            "Order placed",
            extra={
                "order_id": order.id,
                "listing_id": listing_id,
                "profile_id": buyer.id,
                "status": order.status,
            },
        )
        return order

    # --- transitions ----------------------------------------------------------

    async def transition_order(
        self, actor: Profile, order_id: OrderId, target: OrderStatus,
    ) -> Order:
        """Move an order to target status, adjusting stock when completing."""
        target = OrderStatus(target)
        ctx = ErrorContext(order_id=str(order_id), profile_id=str(actor.id))

        async with self.store.transaction() as tx:
            order = await tx.get_order(order_id)
            if order is None:
                raise ResourceNotFoundError("Order", str(order_id), ctx)

            side = resolve_actor(order.buyer_id, order.seller_id, actor.id)
            validate_transition(order.status, target, side)

            if touches_stock(target):
                await self._take_stock_for(tx, order, ctx)
                await self._write_status_after_stock(tx, order, target, ctx)
            else:
                await self._write_status(tx, order, target, ctx)

            updated = order.model_copy(update={"status": target})

        logger.info(
            "Order status changed",
            extra={"order_id": order_id, "profile_id": actor.id, "status": target.value},
        )
        return updated

    async def accept(self, seller: Profile, order_id: OrderId) -> Order:
        return await self.transition_order(seller, order_id, OrderStatus.ACCEPTED)

    async def decline(self, seller: Profile, order_id: OrderId) -> Order:
        return await self.transition_order(seller, order_id, OrderStatus.DECLINED)

    async def cancel(self, actor: Profile, order_id: OrderId) -> Order:
        return await self.transition_order(actor, order_id, OrderStatus.CANCELLED)

    async def complete(self, seller: Profile, order_id: OrderId) -> Order:
        return await self.transition_order(seller, order_id, OrderStatus.COMPLETED)

    # --- internals ------------------------------------------------------------

    async def _take_stock_for(
        self, tx: StoreTransaction, order: Order, ctx: ErrorContext,
    ) -> None:
        ctx.listing_id = str(order.produce_id)
        listing = await tx.get_listing(order.produce_id)
        if listing is None:
            raise ResourceNotFoundError("Listing", str(order.produce_id), ctx)

        change = plan_decrement(listing.quantity, order.quantity)
        applied = await tx.update_listing_if(
            listing.id, change.values(), expected={"quantity": listing.quantity},
        )
        if not applied:
            raise ConflictError(
                f"Listing '{listing.id}' changed while completing order", ctx,
            )

    async def _write_status(
        self, tx: StoreTransaction, order: Order, target: OrderStatus, ctx: ErrorContext,
    ) -> None:
        written = await tx.update_order_if(
            order.id, {"status": target.value}, expected={"status": order.status},
        )
        if not written:
            raise ConflictError(f"Order '{order.id}' changed while updating", ctx)

    async def _write_status_after_stock(
        self, tx: StoreTransaction, order: Order, target: OrderStatus, ctx: ErrorContext,
    ) -> None:
        try:
            await self._write_status(tx, order, target, ctx)
        except FarmLinkError as e:
            if self.store.atomic:
                raise
            logger.critical(
                "Listing adjusted but order status write failed",
                extra={"order_id": order.id, "listing_id": order.produce_id, "error_code": e.code},
            )
            raise PartialFailureError(
                f"Stock for order '{order.id}' was taken but its status "
                f"could not be set to '{target.value}': {e.message}",
                ctx,
            ) from e

    async def _insert_order_after_decrement(
        self, tx: StoreTransaction, order_data: dict, ctx: ErrorContext,
    ) -> Order:
        try:
            return await tx.insert_order(order_data)
        except FarmLinkError as e:
            if self.store.atomic:
                raise
            logger.critical(
                "Listing decremented but order insert failed",
                extra={"listing_id": order_data["produce_id"], "error_code": e.code},
            )
            raise PartialFailureError(
                f"Stock on listing '{order_data['produce_id']}' was taken "
                f"but the order could not be created: {e.message}",
                ctx,
            ) from e

    async def _refresh_catalog(self) -> None:
        if self.catalog is None:
            return
        try:
            await self.catalog.load_catalog()
        except FarmLinkError as e:
            logger.warning(f"Catalog refresh after conflict failed: {e.message}")
