"""Stale checkout expiry for abandoned online payments.

MoMo and PayPal orders reserve stock when they are placed. If the customer
never completes the payment, the order would hold that stock forever.
Triggered periodically by an external scheduler via the maintenance API
endpoint, this rejects online-payment orders still pending/pending after
the threshold and hands their stock back. Cash orders are never expired.

Candidates are re-read under the order lock before they are rejected, so an
order captured while the sweep runs is left alone.
"""

import os
from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import InvalidOperationError, ValidationError
from protean.utils.globals import current_domain

from storefront.exceptions import StorefrontError
from storefront.order.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from storefront.order.queries import get_order
from storefront.order.status import update_order_status
from storefront.utils.locks import order_locks

logger = structlog.get_logger(__name__)

ONLINE_METHODS = {PaymentMethod.MOMO.value, PaymentMethod.PAYPAL.value}


def default_threshold_hours() -> int:
    return int(os.environ.get("STALE_ORDER_HOURS", "24"))


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone(UTC).replace(tzinfo=None)
    return moment


def _is_stale(order: Order, cutoff: datetime) -> bool:
    return (
        order.payment_method in ONLINE_METHODS
        and order.payment_status == PaymentStatus.PENDING.value
        and order.order_status == OrderStatus.PENDING.value
        and order.order_date is not None
        and _naive_utc(order.order_date) <= cutoff
    )


def find_stale_orders(cutoff: datetime) -> list[Order]:
    pending = (
        current_domain.repository_for(Order)
        ._dao.query.filter(
            payment_status=PaymentStatus.PENDING.value,
            order_status=OrderStatus.PENDING.value,
        )
        .all()
        .items
    )
    return [order for order in pending if _is_stale(order, cutoff)]


def expire_stale_orders(threshold_hours: int | None = None, as_of: datetime | None = None) -> int:
    """Reject unpaid online orders older than the threshold; returns how many were expired."""
    as_of = as_of or datetime.now(UTC)
    threshold_hours = threshold_hours or default_threshold_hours()
    cutoff = _naive_utc(as_of - timedelta(hours=threshold_hours))

    logger.info("Checking for stale orders", cutoff=cutoff.isoformat(), threshold_hours=threshold_hours)

    stale = find_stale_orders(cutoff)
    if not stale:
        logger.info("No stale orders found")
        return 0

    expired_count = 0
    for candidate in stale:
        order_id = str(candidate.id)
        try:
            with order_locks.hold(order_id):
                order = get_order(order_id)
                if not _is_stale(order, cutoff):
                    logger.info("Order settled before expiry", order_id=order_id, payment_status=order.payment_status)
                    continue

                expired_count += update_order_status(
                    order_id,
                    OrderStatus.REJECTED.value,
                    reason="payment not completed in time",
                )
            logger.info(
                "Expired stale order",
                order_id=order_id,
                payment_method=order.payment_method,
                order_date=str(order.order_date),
            )
        except (ValidationError, InvalidOperationError, StorefrontError) as exc:
            logger.warning("Failed to expire order", order_id=order_id, error=str(exc))

    logger.info("Stale order expiry complete", expired_count=expired_count)
    return expired_count
