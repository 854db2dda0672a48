"""Capture Handler: finalizes an asynchronous (PayPal/MoMo) payment.

Capture is idempotent: it runs under a per-order lock and checks the
order's payment status first, so a repeated callback returns the already
paid order without calling the gateway or touching stock again. Stock is
only reserved here when the order no longer holds a reservation.
"""

import structlog
from protean.utils.globals import current_domain

from storefront.exceptions import (
    GatewayError,
    InvalidRequest,
    InvalidStatusTransition,
    PaymentNotApproved,
)
from storefront.inventory.adjuster import InventoryAdjuster
from storefront.notification.order_events import notify_status_change
from storefront.order.order import Order, OrderStatus, PaymentMethod
from storefront.order.payment import RecordPaymentCapture, RecordStockReservation
from storefront.order.queries import get_order
from storefront.payment.gateway import get_gateway
from storefront.utils.locks import order_locks

logger = structlog.get_logger(__name__)


class CaptureHandler:
    def __init__(self, adjuster: InventoryAdjuster | None = None) -> None:
        self.adjuster = adjuster or InventoryAdjuster()

    def capture(self, order_id: str, payment_id: str, payer_id: str | None = None) -> Order:
        if not order_id or not payment_id:
            raise InvalidRequest("order_id and payment_id are required")

        with order_locks.hold(order_id):
            order = get_order(order_id)

            if order.is_paid:
                logger.info("Payment already captured", order_id=order_id, payment_id=order.payment_id)
                return order

            if order.is_terminal:
                raise InvalidStatusTransition(order.order_status, OrderStatus.CONFIRMED.value)

            if PaymentMethod(order.payment_method) == PaymentMethod.CASH:
                raise InvalidRequest("Cash orders are paid on delivery and cannot be captured", order_id=order_id)

            result = get_gateway(order.payment_method).execute_payment(payment_id, payer_id)
            if result.errored:
                logger.error("Payment execution failed", order_id=order_id, reason=result.failure_reason)
                raise GatewayError("Payment capture failed", error=result.failure_reason, order_id=order_id)
            if not result.approved:
                logger.warning("Payment not approved", order_id=order_id, state=result.state)
                raise PaymentNotApproved(
                    "Payment not approved",
                    error=result.failure_reason,
                    order_id=order_id,
                    state=result.state,
                )

            if not order.stock_reserved:
                self.adjuster.reserve(order.line_items_as_dicts(), order_ref=order_id)
                current_domain.process(RecordStockReservation(order_id=order_id), asynchronous=False)

            current_domain.process(
                RecordPaymentCapture(
                    order_id=order_id,
                    payment_id=result.payment_id or payment_id,
                    payer_id=result.payer_id or payer_id,
                ),
                asynchronous=False,
            )

            logger.info("Payment captured", order_id=order_id, payment_method=order.payment_method)
            captured = get_order(order_id)

        if captured.order_status != order.order_status:
            notify_status_change(str(captured.user_id), order_id, order.order_status, captured.order_status)
        return captured
