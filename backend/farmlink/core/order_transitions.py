"""Order Transitions — the order status state machine and who may drive it.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Terminal statuses (completed, declined, cancelled) have no outgoing edges
    - Buyer may only cancel their own pending order; every other edge is the seller's
    - Only a move into COMPLETED touches listing stock

Design Decisions:
    - Transition table as data: one place to read the whole lifecycle
    - Raise InvalidTransitionError rather than return error dicts: the workflow
      propagates typed outcomes to its caller without translation
"""

from farmlink.core.domain_types import (
    OrderActor,
    OrderStatus,
    ProfileId,
    TERMINAL_ORDER_STATUSES,
)
from farmlink.core.errors import InvalidTransitionError, PermissionDeniedError


# (from, to) -> actor allowed to make the move
TRANSITIONS: dict[tuple[OrderStatus, OrderStatus], OrderActor] = {
    (OrderStatus.PENDING, OrderStatus.ACCEPTED): OrderActor.SELLER,
    (OrderStatus.PENDING, OrderStatus.DECLINED): OrderActor.SELLER,
    (OrderStatus.PENDING, OrderStatus.CANCELLED): OrderActor.BUYER,
    (OrderStatus.ACCEPTED, OrderStatus.COMPLETED): OrderActor.SELLER,
    (OrderStatus.ACCEPTED, OrderStatus.CANCELLED): OrderActor.SELLER,
}


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL_ORDER_STATUSES


def resolve_actor(
    buyer_id: ProfileId, seller_id: ProfileId, profile_id: ProfileId,
) -> OrderActor:
    """Which side of the order profile_id is on.

    Raises PermissionDeniedError for a profile that is neither.
    """
    if profile_id == seller_id:
        return OrderActor.SELLER
    if profile_id == buyer_id:
        return OrderActor.BUYER
    raise PermissionDeniedError("Only the buyer or seller of an order may change it.")


def allowed_targets(current: OrderStatus, actor: OrderActor) -> list[OrderStatus]:
    """Statuses actor may move an order to from current, in table order."""
    current = OrderStatus(current)
    return [
        target for (source, target), who in TRANSITIONS.items()
        if source == current and who == actor
    ]


def validate_transition(
    current: OrderStatus, target: OrderStatus, actor: OrderActor,
) -> None:
    """Raise InvalidTransitionError unless actor may move current -> target."""
    current = OrderStatus(current)
    target = OrderStatus(target)

    if current in TERMINAL_ORDER_STATUSES:
        raise InvalidTransitionError(
            current.value, target.value, "order is already final",
        )

    permitted = TRANSITIONS.get((current, target))
    if permitted is None:
        raise InvalidTransitionError(
            current.value, target.value, "transition not allowed",
        )
    if permitted != actor:
        raise InvalidTransitionError(
            current.value, target.value,
            f"only the {permitted.value} may do this",
        )


def touches_stock(target: OrderStatus) -> bool:
    return OrderStatus(target) == OrderStatus.COMPLETED
