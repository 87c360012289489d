"""Order Transitions — verifies the status state machine and actor rules.

Tests:
    - Every edge in the table is accepted for its actor and rejected for the other
    - Terminal statuses have no outgoing edges
    - Skipping a step (pending -> completed) is rejected
    - Only COMPLETED touches stock
    - Strangers to an order are refused before any transition check
"""

from uuid import uuid4

import pytest

from farmlink.core.domain_types import OrderActor, OrderStatus
from farmlink.core.errors import InvalidTransitionError, PermissionDeniedError
from farmlink.core.order_transitions import (
    TRANSITIONS,
    allowed_targets,
    is_terminal,
    resolve_actor,
    touches_stock,
    validate_transition,
)


@pytest.mark.parametrize("edge,actor", list(TRANSITIONS.items()))
def test_table_edges_accepted_for_their_actor(edge, actor):
    current, target = edge
    validate_transition(current, target, actor)


@pytest.mark.parametrize("edge,actor", list(TRANSITIONS.items()))
def test_table_edges_rejected_for_the_other_side(edge, actor):
    current, target = edge
    other = OrderActor.BUYER if actor == OrderActor.SELLER else OrderActor.SELLER
    with pytest.raises(InvalidTransitionError, match="only the"):
        validate_transition(current, target, other)


@pytest.mark.parametrize("terminal", [
    OrderStatus.COMPLETED, OrderStatus.DECLINED, OrderStatus.CANCELLED,
])
def test_terminal_statuses_have_no_way_out(terminal):
    assert is_terminal(terminal)
    for target in OrderStatus:
        with pytest.raises(InvalidTransitionError, match="already final"):
            validate_transition(terminal, target, OrderActor.SELLER)
    assert allowed_targets(terminal, OrderActor.SELLER) == []


def test_pending_cannot_jump_to_completed():
    with pytest.raises(InvalidTransitionError) as exc:
        validate_transition(OrderStatus.PENDING, OrderStatus.COMPLETED, OrderActor.SELLER)
    assert exc.value.code == "INVALID_TRANSITION"
    assert exc.value.current == "pending"
    assert exc.value.target == "completed"


def test_raw_strings_are_accepted():
    validate_transition("pending", "accepted", OrderActor.SELLER)


def test_allowed_targets_per_actor():
    assert allowed_targets(OrderStatus.PENDING, OrderActor.SELLER) == [
        OrderStatus.ACCEPTED, OrderStatus.DECLINED,
    ]
    assert allowed_targets(OrderStatus.PENDING, OrderActor.BUYER) == [OrderStatus.CANCELLED]
    assert allowed_targets(OrderStatus.ACCEPTED, OrderActor.BUYER) == []


def test_only_completion_touches_stock():
    assert touches_stock(OrderStatus.COMPLETED)
    assert not any(
        touches_stock(s) for s in OrderStatus if s != OrderStatus.COMPLETED
    )


def test_resolve_actor():
    buyer, seller = uuid4(), uuid4()
    assert resolve_actor(buyer, seller, seller) == OrderActor.SELLER
    assert resolve_actor(buyer, seller, buyer) == OrderActor.BUYER
    with pytest.raises(PermissionDeniedError):
        resolve_actor(buyer, seller, uuid4())
