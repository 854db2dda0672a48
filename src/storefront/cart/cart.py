"""Shopping Cart aggregate (CQRS): one cart per user, emptied at checkout.

The cart only tracks what the user has picked; prices are resolved from the
stock ledger when an order is placed. Checkout empties the cart exactly once
per order, whatever the payment method.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()
    cleared_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def add_item(self, product_id, quantity):
        """Add an item to the cart (or increase quantity if already present)."""
        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now))

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                user_id=str(self.user_id),
                product_id=str(product_id),
                quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(user_id=str(self.user_id), product_id=str(product_id)))

    def clear(self, order_id=None):
        """Empty the cart. Returns the number of lines removed."""
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        now = datetime.now(UTC)
        self.updated_at = now
        self.cleared_at = now
        self.raise_(
            CartCleared(
                user_id=str(self.user_id),
                order_id=str(order_id) if order_id else None,
                items_removed=removed,
            )
        )
        return removed
