"""Tests for Order state machine: valid transitions and terminal states."""

import pytest
from storefront.exceptions import InvalidStatusTransition
from storefront.order.events import OrderStatusChanged
from storefront.order.order import Order, OrderStatus

_PATH = [OrderStatus.CONFIRMED, OrderStatus.IN_SHIPPING, OrderStatus.DELIVERED]


def _make_order():
    order = Order.create(
        user_id="user-001",
        address_id="addr-001",
        payment_method="cash",
        line_items=[{"product_id": "prod-001", "quantity": 1, "unit_price": 50000.0}],
        raw_total=50000.0,
        discount=0.0,
        total_amount=50000.0,
    )
    order._events.clear()
    return order


def _order_at_state(target_status):
    """Create an order and advance it to the desired state."""
    order = _make_order()
    if target_status == OrderStatus.PENDING:
        return order
    if target_status == OrderStatus.REJECTED:
        order.change_status(OrderStatus.REJECTED.value)
        order._events.clear()
        return order

    for status in _PATH:
        order.change_status(status.value)
        order._events.clear()
        if status == target_status:
            return order
    raise AssertionError(f"unreachable state {target_status}")


class TestValidTransitions:
    @pytest.mark.parametrize(
        "start,target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.IN_SHIPPING),
            (OrderStatus.IN_SHIPPING, OrderStatus.DELIVERED),
            (OrderStatus.PENDING, OrderStatus.REJECTED),
            (OrderStatus.CONFIRMED, OrderStatus.REJECTED),
            (OrderStatus.IN_SHIPPING, OrderStatus.REJECTED),
        ],
    )
    def test_transition_allowed(self, start, target):
        order = _order_at_state(start)
        assert order.change_status(target.value) is True
        assert order.order_status == target.value

    def test_transition_raises_status_changed_event(self):
        order = _make_order()
        order.change_status("confirmed", reason="checked by admin")

        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "confirmed"
        assert event.user_id == "user-001"
        assert event.reason == "checked by admin"

    def test_transition_updates_order_update_date(self):
        order = _make_order()
        before = order.order_update_date
        order.change_status("confirmed")
        assert order.order_update_date >= before


class TestInvalidTransitions:
    @pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.REJECTED])
    @pytest.mark.parametrize(
        "target",
        [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.IN_SHIPPING],
    )
    def test_terminal_states_never_change(self, terminal, target):
        order = _order_at_state(terminal)
        with pytest.raises(InvalidStatusTransition):
            order.change_status(target.value)
        assert order.order_status == terminal.value

    def test_delivered_cannot_be_rejected(self):
        order = _order_at_state(OrderStatus.DELIVERED)
        with pytest.raises(InvalidStatusTransition):
            order.change_status("rejected")

    def test_cannot_move_backwards(self):
        order = _order_at_state(OrderStatus.IN_SHIPPING)
        with pytest.raises(InvalidStatusTransition) as exc:
            order.change_status("confirmed")
        assert exc.value.current == "inShipping"
        assert exc.value.target == "confirmed"

    def test_cannot_skip_ahead(self):
        order = _make_order()
        with pytest.raises(InvalidStatusTransition):
            order.change_status("delivered")

    def test_same_status_is_a_no_op(self):
        order = _make_order()
        assert order.change_status("pending") is False
        assert order._events == []

    def test_unknown_status_is_rejected(self):
        order = _make_order()
        with pytest.raises(ValueError):
            order.change_status("shipped")
