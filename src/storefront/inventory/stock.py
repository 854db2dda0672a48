"""ProductStock aggregate (CQRS): per-product stock ledger.

Holds the sellable quantity and list price for one product. The product id
is the aggregate identity. Quantities are only ever decremented through a
conditional ``reserve`` (fails instead of going negative) and restored
through ``release``; both are driven by the Inventory Adjuster.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront
from storefront.exceptions import InsufficientStock
from storefront.inventory.events import (
    StockDepleted,
    StockRegistered,
    StockReleased,
    StockReplenished,
    StockReserved,
)


@storefront.aggregate
class ProductStock:
    product_id = Identifier(identifier=True, required=True)
    title = String(max_length=255)
    price = Float(default=0.0, min_value=0.0)
    total_stock = Integer(default=0, min_value=0)
    updated_at = DateTime()

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.total_stock is not None and self.total_stock < 0:
            raise ValidationError({"total_stock": ["Stock cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, product_id, total_stock=0, price=0.0, title=None):
        stock = cls(
            product_id=product_id,
            title=title,
            price=price,
            total_stock=total_stock,
            updated_at=datetime.now(UTC),
        )
        stock.raise_(
            StockRegistered(
                product_id=str(product_id),
                total_stock=total_stock,
                price=price,
            )
        )
        return stock

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def reserve(self, quantity, order_ref=None):
        """Decrement stock only if enough is on hand."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if self.total_stock < quantity:
            raise InsufficientStock(
                product_id=str(self.product_id),
                requested=quantity,
                available=self.total_stock,
            )

        self.total_stock -= quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockReserved(
                product_id=str(self.product_id),
                quantity=quantity,
                remaining=self.total_stock,
                order_ref=order_ref,
            )
        )
        if self.total_stock == 0:
            self.raise_(StockDepleted(product_id=str(self.product_id)))

    def release(self, quantity, order_ref=None):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self.total_stock += quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockReleased(
                product_id=str(self.product_id),
                quantity=quantity,
                remaining=self.total_stock,
                order_ref=order_ref,
            )
        )

    def restock(self, quantity):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self.total_stock += quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockReplenished(
                product_id=str(self.product_id),
                quantity=quantity,
                remaining=self.total_stock,
            )
        )

    def reprice(self, price):
        if price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})
        self.price = price
        self.updated_at = datetime.now(UTC)
