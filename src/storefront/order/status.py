"""Order status administration: command and handler.

Admins move an order along its lifecycle. Illegal moves (anything out of
delivered or rejected, or skipping backwards) raise InvalidStatusTransition.
Rejecting an order that still holds inventory hands the stock back.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import InvalidRequest
from storefront.inventory.adjuster import InventoryAdjuster
from storefront.notification.order_events import notify_status_change
from storefront.order.order import Order, OrderStatus
from storefront.order.payment import RecordStockRelease
from storefront.order.queries import get_order
from storefront.utils.locks import order_locks

logger = structlog.get_logger(__name__)

VALID_STATUSES = [status.value for status in OrderStatus]


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    order_status = String(required=True, max_length=20)
    reason = String(max_length=255)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        """Returns the number of orders modified (0 when already in that status)."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        changed = order.change_status(command.order_status, reason=command.reason)
        if changed:
            repo.add(order)
        return 1 if changed else 0


def update_order_status(order_id: str, new_status: str, reason: str | None = None) -> int:
    """Validate and apply an admin status change; returns the modified count.

    The order owner is notified once the change is committed.
    """
    if new_status not in VALID_STATUSES:
        raise InvalidRequest(f"Invalid order status: {new_status}", valid_statuses=VALID_STATUSES)

    with order_locks.hold(order_id):
        previous_status = get_order(order_id).order_status
        modified = current_domain.process(
            UpdateOrderStatus(order_id=order_id, order_status=new_status, reason=reason),
            asynchronous=False,
        )

        order = get_order(order_id)
        if new_status == OrderStatus.REJECTED.value and modified and order.stock_reserved:
            InventoryAdjuster().release(order.line_items_as_dicts(), order_ref=str(order.id))
            current_domain.process(RecordStockRelease(order_id=order_id), asynchronous=False)

    logger.info("Order status updated", order_id=order_id, order_status=new_status, modified=modified)
    if modified:
        notify_status_change(str(order.user_id), order_id, previous_status, new_status)
    return modified
