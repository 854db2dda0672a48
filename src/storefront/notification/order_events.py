"""Customer notifications for order status changes.

Called by the workflows once a status change has been committed. Delivery is
best-effort: a failing notifier is logged and never affects the status change
that triggered it.
"""

import structlog

from storefront.notification.channel import get_notifier

logger = structlog.get_logger(__name__)

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed.",
    "inShipping": "Your order is on its way.",
    "delivered": "Your order has been delivered.",
    "rejected": "Your order has been rejected.",
    "pending": "Your order is pending.",
}


def notify_status_change(user_id: str, order_id: str, previous_status: str, new_status: str) -> bool:
    """Tell the order owner their order moved to ``new_status``; returns True when delivered."""
    payload = {
        "order_id": str(order_id),
        "previous_status": previous_status,
        "new_status": new_status,
        "message": STATUS_MESSAGES.get(new_status, f"Your order status is now {new_status}."),
    }
    try:
        result = get_notifier().notify(str(user_id), "order_status_changed", payload)
    except Exception as exc:
        logger.warning(
            "Order status notification failed",
            order_id=str(order_id),
            user_id=str(user_id),
            error=str(exc),
        )
        return False

    if result.get("status") != "sent":
        logger.warning(
            "Order status notification not delivered",
            order_id=str(order_id),
            error=result.get("error"),
        )
        return False

    logger.info(
        "Order status notification sent",
        order_id=str(order_id),
        message_id=result.get("message_id"),
    )
    return True
