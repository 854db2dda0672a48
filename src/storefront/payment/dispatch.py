"""Payment Dispatcher: routes a freshly created order to its payment method.

- cash: nothing to collect up front, the order is complete as created
- momo: ask the MoMo gateway for a pay URL and record it on the order
- paypal: the client drives the PayPal approval flow; the order waits for
  a later capture and the gateway is not contacted here

A MoMo failure raises GatewayError but leaves the order (and its stock
reservation) in place as a pending draft that can be dispatched again.
"""

import os
from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from storefront.exceptions import GatewayError, InvalidRequest
from storefront.order.order import Order, PaymentMethod
from storefront.order.payment import RecordPayUrl
from storefront.order.queries import get_order
from storefront.payment.gateway import get_gateway

logger = structlog.get_logger(__name__)

DEFAULT_REDIRECT_URL = "http://localhost:5173/shop/payment-success"


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Immediate:
    success: bool = True


@dataclass(frozen=True)
class Redirect:
    url: str


@dataclass(frozen=True)
class RequiresExternalCapture:
    pass


DispatchOutcome = Immediate | Redirect | RequiresExternalCapture


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------
class PaymentDispatcher:
    def __init__(self, redirect_url: str | None = None) -> None:
        self.redirect_url = redirect_url or os.environ.get("MOMO_REDIRECT_URL", DEFAULT_REDIRECT_URL)

    def dispatch(self, order: Order) -> DispatchOutcome:
        method = PaymentMethod(order.payment_method)

        if method == PaymentMethod.CASH:
            logger.info("Cash order placed", order_id=str(order.id))
            return Immediate(success=True)

        if method == PaymentMethod.PAYPAL:
            logger.info("PayPal order awaiting capture", order_id=str(order.id))
            return RequiresExternalCapture()

        return self._dispatch_momo(order)

    def _dispatch_momo(self, order: Order) -> Redirect:
        order_id = str(order.id)
        result = get_gateway(PaymentMethod.MOMO.value).create_redirect(
            amount=order.total_amount,
            order_info=f"Order ID: {order_id}",
            redirect_url=self.redirect_url,
            order_id=order_id,
        )

        if not result.success or not result.pay_url:
            logger.error("MoMo payment creation failed", order_id=order_id, reason=result.failure_reason)
            raise GatewayError(
                "Failed to create MoMo payment",
                error=result.failure_reason,
                order_id=order_id,
            )

        current_domain.process(RecordPayUrl(order_id=order_id, pay_url=result.pay_url), asynchronous=False)
        logger.info("MoMo payment created", order_id=order_id, gateway_reference=result.gateway_reference)
        return Redirect(url=result.pay_url)


def retry_dispatch(order_id: str) -> DispatchOutcome:
    """Dispatch a still-unpaid order again (e.g. after a MoMo outage)."""
    order = get_order(order_id)
    if order.is_paid:
        raise InvalidRequest("Order has already been paid", order_id=order_id)
    if order.is_terminal:
        raise InvalidRequest(f"Order is {order.order_status}", order_id=order_id)
    return PaymentDispatcher().dispatch(order)
