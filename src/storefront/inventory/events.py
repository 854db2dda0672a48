"""Domain events for the ProductStock aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ProductStock")
class StockRegistered:
    """A product was added to the stock ledger."""

    __version__ = 1

    product_id = Identifier(required=True)
    total_stock = Integer(required=True)
    price = Float()


@storefront.event(part_of="ProductStock")
class StockReserved:
    """Stock was decremented for an order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)
    order_ref = String(max_length=255)


@storefront.event(part_of="ProductStock")
class StockReleased:
    """A reservation was given back to the ledger."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)
    order_ref = String(max_length=255)


@storefront.event(part_of="ProductStock")
class StockReplenished:
    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    remaining = Integer(required=True)


@storefront.event(part_of="ProductStock")
class StockDepleted:
    """The last unit of a product was reserved."""

    __version__ = 1

    product_id = Identifier(required=True)
