"""Order aggregate (CQRS): a placed order and its status lifecycle.

Order Lifecycle:
    pending → confirmed → inShipping → delivered
    (rejected reachable from any non-terminal state)

Payment Lifecycle:
    pending → paid

The amounts (raw total, discount, total) are snapshotted when the order is
created and never change afterwards. ``stock_reserved`` records whether the
order currently holds inventory, which lets payment capture avoid a second
decrement.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.exceptions import InvalidStatusTransition
from storefront.order.events import (
    OrderPlaced,
    OrderStatusChanged,
    PaymentCaptured,
    PaymentRedirectIssued,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentMethod(Enum):
    CASH = "cash"
    MOMO = "momo"
    PAYPAL = "paypal"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_SHIPPING = "inShipping"
    DELIVERED = "delivered"
    REJECTED = "rejected"


# Valid state transitions
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.REJECTED},
    OrderStatus.CONFIRMED: {OrderStatus.IN_SHIPPING, OrderStatus.REJECTED},
    OrderStatus.IN_SHIPPING: {OrderStatus.DELIVERED, OrderStatus.REJECTED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.REJECTED: set(),  # Terminal
}

TERMINAL_STATES = {status for status, targets in _VALID_TRANSITIONS.items() if not targets}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class LineItem:
    """A product and quantity captured at checkout, with its unit price at that time."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    line_items = HasMany(LineItem)
    address_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    raw_total = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    voucher_code = String(max_length=50)
    payment_id = String(max_length=255)
    payer_id = String(max_length=255)
    pay_url = String(max_length=2048)
    stock_reserved = Boolean(default=False)
    order_date = DateTime()
    order_update_date = DateTime()

    @invariant.post
    def discount_cannot_exceed_raw_total(self):
        if self.discount is not None and self.raw_total is not None and self.discount > self.raw_total:
            raise ValidationError({"discount": ["Discount cannot exceed the order's raw total"]})

    @invariant.post
    def total_must_match_discounted_raw_total(self):
        if self.total_amount is None or self.raw_total is None:
            return
        if round(self.raw_total - (self.discount or 0.0), 2) != round(self.total_amount, 2):
            raise ValidationError({"total_amount": ["Total must equal raw total minus discount"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        address_id,
        payment_method,
        line_items,
        raw_total,
        discount,
        total_amount,
        voucher_code=None,
        stock_reserved=False,
    ):
        """Create a new order in pending/pending state.

        Args:
            line_items: List of dicts with product_id, quantity, unit_price.
        """
        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            address_id=address_id,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            order_status=OrderStatus.PENDING.value,
            line_items=[
                LineItem(
                    product_id=item["product_id"],
                    quantity=item["quantity"],
                    unit_price=float(item["unit_price"]),
                )
                for item in line_items
            ],
            raw_total=raw_total,
            discount=discount,
            total_amount=total_amount,
            voucher_code=voucher_code,
            stock_reserved=stock_reserved,
            order_date=now,
            order_update_date=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                payment_method=payment_method,
                item_count=len(line_items),
                raw_total=raw_total,
                discount=discount,
                total_amount=total_amount,
                voucher_code=voucher_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def line_items_as_dicts(self) -> list[dict]:
        return [
            {
                "product_id": str(item.product_id),
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item in self.line_items
        ]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.order_status) in TERMINAL_STATES

    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.order_status), set())

    def _assert_can_transition(self, target_status: OrderStatus):
        """Validate that the current state allows transition to target."""
        if not self.can_transition_to(target_status):
            raise InvalidStatusTransition(self.order_status, target_status.value)

    # -------------------------------------------------------------------
    # Status lifecycle
    # -------------------------------------------------------------------
    def change_status(self, new_status, reason=None):
        """Move the order to ``new_status``.

        Returns False when the order is already in that status (nothing to
        modify); raises InvalidStatusTransition for a move the table forbids.
        """
        target = OrderStatus(new_status)
        if target == OrderStatus(self.order_status):
            return False

        self._assert_can_transition(target)
        previous = self.order_status
        now = datetime.now(UTC)
        self.order_status = target.value
        self.order_update_date = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=previous,
                new_status=target.value,
                reason=reason,
                changed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_pay_url(self, pay_url):
        if self.is_paid:
            raise ValidationError({"payment_status": ["Order has already been paid"]})
        self.pay_url = pay_url
        self.order_update_date = datetime.now(UTC)
        self.raise_(PaymentRedirectIssued(order_id=str(self.id), pay_url=pay_url))

    def mark_paid(self, payment_id, payer_id=None):
        """Record a captured payment.

        PayPal orders advance to confirmed once paid; MoMo orders stay
        pending until an admin confirms them.
        """
        if self.is_paid:
            raise ValidationError({"payment_status": ["Order has already been paid"]})
        if self.is_terminal:
            raise InvalidStatusTransition(self.order_status, OrderStatus.CONFIRMED.value)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PAID.value
        self.payment_id = payment_id
        self.payer_id = payer_id
        self.order_update_date = now

        self.raise_(
            PaymentCaptured(
                order_id=str(self.id),
                payment_id=payment_id,
                payer_id=payer_id,
                payment_method=self.payment_method,
                amount=self.total_amount,
                captured_at=now,
            )
        )

        if (
            PaymentMethod(self.payment_method) == PaymentMethod.PAYPAL
            and OrderStatus(self.order_status) == OrderStatus.PENDING
        ):
            self.change_status(OrderStatus.CONFIRMED.value, reason="payment captured")

    # -------------------------------------------------------------------
    # Inventory marker
    # -------------------------------------------------------------------
    def mark_stock_reserved(self):
        self.stock_reserved = True

    def mark_stock_released(self):
        self.stock_reserved = False
