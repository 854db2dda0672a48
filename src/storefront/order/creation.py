"""Order creation: command and handler.

Persists an order whose totals were already computed by the pricing
engine. Placement (pricing, stock, cart, dispatch) is orchestrated by
``order.placement``.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, PaymentMethod


@storefront.command(part_of="Order")
class CreateOrder:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    line_items = Text(required=True)  # JSON: list of {product_id, quantity, unit_price}
    raw_total = Float(required=True)
    discount = Float(default=0.0)
    total_amount = Float(required=True)
    voucher_code = String(max_length=50)
    stock_reserved = Boolean(default=False)


@storefront.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        line_items = json.loads(command.line_items) if isinstance(command.line_items, str) else command.line_items

        order = Order.create(
            user_id=command.user_id,
            address_id=command.address_id,
            payment_method=command.payment_method,
            line_items=line_items,
            raw_total=command.raw_total,
            discount=command.discount or 0.0,
            total_amount=command.total_amount,
            voucher_code=command.voucher_code,
            stock_reserved=bool(command.stock_reserved),
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
