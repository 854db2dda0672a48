"""PayPal payment creation: the client-initiated first half of a PayPal checkout.

PayPal does not settle in VND, so VND amounts are converted to USD before
the payment is created. The customer approves the payment at the returned
URL and is sent back with ``paymentId``/``PayerID``, which the client then
submits to the capture endpoint.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from urllib.parse import urlencode

import structlog

from storefront.exceptions import GatewayError, InvalidRequest
from storefront.order.order import PaymentMethod
from storefront.payment.currency import convert, validate_currency
from storefront.payment.gateway import get_gateway

logger = structlog.get_logger(__name__)

DEFAULT_RETURN_URL = "http://localhost:5173/shop/paypal-return"
DEFAULT_CANCEL_URL = "http://localhost:5173/shop/paypal-cancel"
SETTLEMENT_CURRENCY = "USD"


@dataclass(frozen=True)
class PayPalCheckout:
    payment_id: str
    approval_url: str
    original_amount: Decimal
    original_currency: str
    amount: Decimal
    currency: str = SETTLEMENT_CURRENCY

    def as_dict(self) -> dict:
        return {
            "payment_id": self.payment_id,
            "approval_url": self.approval_url,
            "original_amount": float(self.original_amount),
            "original_currency": self.original_currency,
            "amount": float(self.amount),
            "currency": self.currency,
        }


def _with_order(url: str, order_id: str | None) -> str:
    if not order_id:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode({'orderId': order_id})}"


def create_paypal_payment(
    amount,
    currency: str = "VND",
    description: str = "Storefront order",
    order_id: str | None = None,
) -> PayPalCheckout:
    currency = validate_currency(currency)
    original = Decimal(str(amount))
    if original <= 0:
        raise InvalidRequest("Amount must be greater than zero")

    converted = convert(original, currency, SETTLEMENT_CURRENCY)
    if converted <= 0:
        raise InvalidRequest("Amount is too small to be paid with PayPal")

    result = get_gateway(PaymentMethod.PAYPAL.value).create_payment(
        amount=float(converted),
        currency=SETTLEMENT_CURRENCY,
        description=description,
        return_url=_with_order(os.environ.get("PAYPAL_RETURN_URL", DEFAULT_RETURN_URL), order_id),
        cancel_url=_with_order(os.environ.get("PAYPAL_CANCEL_URL", DEFAULT_CANCEL_URL), order_id),
    )
    if not result.success or not result.approval_url:
        logger.error("PayPal payment creation failed", order_id=order_id, reason=result.failure_reason)
        raise GatewayError("Failed to create PayPal payment", error=result.failure_reason)

    logger.info(
        "PayPal payment created",
        order_id=order_id,
        payment_id=result.payment_id,
        original_amount=str(original),
        original_currency=currency,
        amount=str(converted),
    )
    return PayPalCheckout(
        payment_id=result.payment_id,
        approval_url=result.approval_url,
        original_amount=original,
        original_currency=currency,
        amount=converted,
    )
