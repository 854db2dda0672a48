"""Inventory Adjuster: reserve and release stock for a set of line items.

Every product is adjusted in its own command, under a per-product lock, so
concurrent orders for the same product are serialized while the
conditional decrement in ``ProductStock.reserve`` refuses to go below zero.
A reservation that fails part-way compensates the decrements it already
applied, so callers never observe a partial reservation.
"""

from collections.abc import Iterable

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import InsufficientStock
from storefront.inventory.stock import ProductStock
from storefront.utils.locks import product_locks

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ProductStock")
class ReserveStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    order_ref = String(max_length=255)


@storefront.command(part_of="ProductStock")
class ReleaseStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    order_ref = String(max_length=255)


@storefront.command_handler(part_of=ProductStock)
class StockAdjustmentHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        repo = current_domain.repository_for(ProductStock)
        stock = repo.get(command.product_id)
        stock.reserve(command.quantity, order_ref=command.order_ref)
        repo.add(stock)
        return stock.total_stock

    @handle(ReleaseStock)
    def release_stock(self, command):
        repo = current_domain.repository_for(ProductStock)
        stock = repo.get(command.product_id)
        stock.release(command.quantity, order_ref=command.order_ref)
        repo.add(stock)
        return stock.total_stock


def _merge_quantities(line_items: Iterable[dict]) -> list[tuple[str, int]]:
    """Collapse repeated products into one adjustment each, keeping first-seen order."""
    merged: dict[str, int] = {}
    for item in line_items:
        product_id = str(item["product_id"])
        merged[product_id] = merged.get(product_id, 0) + int(item["quantity"])
    return list(merged.items())


class InventoryAdjuster:
    """Applies all-or-nothing stock adjustments for a set of line items."""

    def reserve(self, line_items: Iterable[dict], order_ref: str | None = None) -> None:
        applied: list[tuple[str, int]] = []
        for product_id, quantity in _merge_quantities(line_items):
            try:
                with product_locks.hold(product_id):
                    current_domain.process(
                        ReserveStock(product_id=product_id, quantity=quantity, order_ref=order_ref),
                        asynchronous=False,
                    )
            except Exception as exc:
                logger.warning(
                    "Stock reservation failed, rolling back",
                    product_id=product_id,
                    requested=quantity,
                    available=exc.available if isinstance(exc, InsufficientStock) else None,
                    error=str(exc),
                    compensating=len(applied),
                    order_ref=order_ref,
                )
                self._compensate(applied, order_ref)
                raise
            applied.append((product_id, quantity))

        logger.info("Stock reserved", order_ref=order_ref, products=len(applied))

    def release(self, line_items: Iterable[dict], order_ref: str | None = None) -> None:
        for product_id, quantity in _merge_quantities(line_items):
            with product_locks.hold(product_id):
                current_domain.process(
                    ReleaseStock(product_id=product_id, quantity=quantity, order_ref=order_ref),
                    asynchronous=False,
                )
        logger.info("Stock released", order_ref=order_ref)

    def _compensate(self, applied: list[tuple[str, int]], order_ref: str | None) -> None:
        for product_id, quantity in reversed(applied):
            with product_locks.hold(product_id):
                current_domain.process(
                    ReleaseStock(product_id=product_id, quantity=quantity, order_ref=order_ref),
                    asynchronous=False,
                )
