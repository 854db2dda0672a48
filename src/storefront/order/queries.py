"""Read-side helpers for orders."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.exceptions import NotFound
from storefront.order.order import Order


def get_order(order_id: str) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound(f"Order {order_id} not found")


def list_orders_for_user(user_id: str) -> list[Order]:
    """All orders of a user, newest first."""
    orders = current_domain.repository_for(Order)._dao.query.filter(user_id=user_id).all().items
    return sorted(orders, key=lambda order: order.order_date, reverse=True)


def order_as_dict(order: Order) -> dict:
    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "address_id": str(order.address_id),
        "line_items": order.line_items_as_dicts(),
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "raw_total": order.raw_total,
        "discount": order.discount,
        "total_amount": order.total_amount,
        "voucher_code": order.voucher_code,
        "payment_id": order.payment_id,
        "payer_id": order.payer_id,
        "pay_url": order.pay_url,
        "stock_reserved": order.stock_reserved,
        "order_date": order.order_date.isoformat() if order.order_date else None,
        "order_update_date": order.order_update_date.isoformat() if order.order_update_date else None,
    }
