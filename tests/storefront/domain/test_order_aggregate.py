"""Tests for the Order aggregate: creation, snapshotted totals and payment."""

import pytest
from protean.exceptions import ValidationError
from storefront.exceptions import InvalidStatusTransition
from storefront.order.events import OrderPlaced, PaymentCaptured, PaymentRedirectIssued
from storefront.order.order import Order, OrderStatus, PaymentStatus


def _make_order(payment_method="paypal", **overrides):
    data = {
        "user_id": "user-001",
        "address_id": "addr-001",
        "payment_method": payment_method,
        "line_items": [
            {"product_id": "prod-001", "quantity": 2, "unit_price": 30000.0},
            {"product_id": "prod-002", "quantity": 1, "unit_price": 40000.0},
        ],
        "raw_total": 100000.0,
        "discount": 5000.0,
        "total_amount": 95000.0,
        "voucher_code": "SALE10",
    }
    data.update(overrides)
    return Order.create(**data)


class TestOrderCreation:
    def test_new_order_is_pending_and_unpaid(self):
        order = _make_order()
        assert order.order_status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.order_date is not None

    def test_line_items_are_embedded(self):
        order = _make_order()
        assert len(order.line_items) == 2
        assert order.line_items_as_dicts()[0] == {"product_id": "prod-001", "quantity": 2, "unit_price": 30000.0}

    def test_totals_are_snapshotted(self):
        order = _make_order()
        assert order.raw_total == 100000.0
        assert order.discount == 5000.0
        assert order.total_amount == 95000.0
        assert order.voucher_code == "SALE10"

    def test_raises_order_placed_event(self):
        order = _make_order()
        events = [e for e in order._events if isinstance(e, OrderPlaced)]
        assert len(events) == 1
        assert events[0].total_amount == 95000.0
        assert events[0].item_count == 2

    def test_discount_cannot_exceed_raw_total(self):
        with pytest.raises(ValidationError):
            _make_order(raw_total=1000.0, discount=2000.0, total_amount=0.0)

    def test_total_must_be_raw_minus_discount(self):
        with pytest.raises(ValidationError):
            _make_order(total_amount=99000.0)

    def test_unknown_payment_method_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_order(payment_method="bitcoin")


class TestPayment:
    def test_paypal_capture_confirms_order(self):
        order = _make_order("paypal")
        order._events.clear()
        order.mark_paid("PAYID-1", "PAYER-1")

        assert order.payment_status == PaymentStatus.PAID.value
        assert order.order_status == OrderStatus.CONFIRMED.value
        assert order.payment_id == "PAYID-1"
        assert order.payer_id == "PAYER-1"
        assert any(isinstance(e, PaymentCaptured) for e in order._events)

    def test_momo_capture_leaves_order_pending(self):
        order = _make_order("momo")
        order.mark_paid("momo-ref", None)
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.order_status == OrderStatus.PENDING.value

    def test_payment_status_only_moves_forward(self):
        order = _make_order()
        order.mark_paid("PAYID-1", "PAYER-1")
        with pytest.raises(ValidationError):
            order.mark_paid("PAYID-2", "PAYER-2")
        assert order.payment_id == "PAYID-1"

    def test_rejected_order_cannot_be_paid(self):
        order = _make_order()
        order.change_status("rejected")
        with pytest.raises(InvalidStatusTransition):
            order.mark_paid("PAYID-1", "PAYER-1")

    def test_record_pay_url(self):
        order = _make_order("momo")
        order._events.clear()
        order.record_pay_url("https://pay.example.test/momo/1")
        assert order.pay_url == "https://pay.example.test/momo/1"
        assert isinstance(order._events[0], PaymentRedirectIssued)

    def test_stock_marker(self):
        order = _make_order(stock_reserved=True)
        assert order.stock_reserved is True
        order.mark_stock_released()
        assert order.stock_reserved is False
