"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A new order was created from a cart with its totals snapshotted."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    payment_method = String(required=True, max_length=20)
    item_count = Integer(required=True)
    raw_total = Float(required=True)
    discount = Float(required=True)
    total_amount = Float(required=True)
    voucher_code = String(max_length=50)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    reason = String(max_length=255)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentRedirectIssued:
    """A gateway returned a redirect URL the customer must follow to pay."""

    __version__ = 1

    order_id = Identifier(required=True)
    pay_url = String(required=True, max_length=2048)


@storefront.event(part_of="Order")
class PaymentCaptured:
    """An asynchronous payment was confirmed by its gateway."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=255)
    payer_id = String(max_length=255)
    payment_method = String(required=True, max_length=20)
    amount = Float(required=True)
    captured_at = DateTime(required=True)
