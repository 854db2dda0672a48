"""Order placement: turns a cart checkout request into a persisted order.

Steps, each committed before the next:

1. Validate the request and resolve unit prices from the stock ledger
2. Price the order, applying the voucher if one was given
3. Reserve stock for every line item (all or nothing)
4. Persist the order with its snapshotted totals; release the stock again
   if the write fails
5. Clear the user's cart (once per placement, whatever the payment method)
6. Dispatch the order to its payment method

Nothing is written before steps 1-2 succeed, so a rejected voucher or an
incomplete request leaves no trace. A gateway failure in step 6 keeps the
order as a pending draft that can be dispatched again.
"""

import json
from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.items import ClearCart
from storefront.exceptions import InvalidRequest
from storefront.inventory.adjuster import InventoryAdjuster
from storefront.inventory.stock import ProductStock
from storefront.order.creation import CreateOrder
from storefront.order.order import PaymentMethod
from storefront.order.queries import get_order
from storefront.payment.dispatch import DispatchOutcome, PaymentDispatcher
from storefront.pricing.discounts import PriceBreakdown, PricedLine, compute_total
from storefront.pricing.management import find_voucher

logger = structlog.get_logger(__name__)

PAYMENT_METHODS = [method.value for method in PaymentMethod]


@dataclass(frozen=True)
class PlacementResult:
    order_id: str
    outcome: DispatchOutcome
    pricing: PriceBreakdown


class OrderPlacementService:
    def __init__(
        self,
        adjuster: InventoryAdjuster | None = None,
        dispatcher: PaymentDispatcher | None = None,
    ) -> None:
        self.adjuster = adjuster or InventoryAdjuster()
        self.dispatcher = dispatcher or PaymentDispatcher()

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    def _validate(self, user_id, line_items, address_id, payment_method) -> None:
        if not user_id or not line_items or not address_id or not payment_method:
            raise InvalidRequest("Missing required order information")
        if payment_method not in PAYMENT_METHODS:
            raise InvalidRequest(f"Invalid payment method: {payment_method}", valid_methods=PAYMENT_METHODS)

    def _resolve_lines(self, line_items: list[dict]) -> list[PricedLine]:
        """Fill in missing unit prices from the stock ledger; unknown products are rejected."""
        repo = current_domain.repository_for(ProductStock)
        lines = []
        for item in line_items:
            product_id = item.get("product_id")
            if not product_id:
                raise InvalidRequest("Every line item needs a product_id")
            try:
                stock = repo.get(product_id)
            except ObjectNotFoundError:
                raise InvalidRequest(f"Unknown product: {product_id}")

            unit_price = item.get("unit_price")
            lines.append(
                PricedLine.from_dict(
                    {
                        "product_id": product_id,
                        "quantity": item.get("quantity") or 0,
                        "unit_price": stock.price if unit_price is None else unit_price,
                    }
                )
            )
        return lines

    # -------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------
    def create_order(
        self,
        user_id: str,
        line_items: list[dict],
        address_id: str,
        payment_method: str,
        voucher_code: str | None = None,
    ) -> PlacementResult:
        self._validate(user_id, line_items, address_id, payment_method)
        lines = self._resolve_lines(line_items)

        voucher = find_voucher(voucher_code).terms() if voucher_code else None
        pricing = compute_total(lines, voucher)
        items_data = [
            {"product_id": line.product_id, "quantity": line.quantity, "unit_price": float(line.unit_price)}
            for line in lines
        ]

        self.adjuster.reserve(items_data, order_ref=f"user:{user_id}")
        try:
            order_id = current_domain.process(
                CreateOrder(
                    user_id=user_id,
                    address_id=address_id,
                    payment_method=payment_method,
                    line_items=json.dumps(items_data),
                    raw_total=float(pricing.raw_total),
                    discount=float(pricing.discount),
                    total_amount=float(pricing.final_total),
                    voucher_code=voucher.code if voucher else None,
                    stock_reserved=True,
                ),
                asynchronous=False,
            )
        except Exception:
            logger.error("Order could not be saved, releasing stock", user_id=user_id)
            self.adjuster.release(items_data, order_ref=f"user:{user_id}")
            raise

        logger.info(
            "Order created",
            order_id=order_id,
            user_id=user_id,
            payment_method=payment_method,
            raw_total=str(pricing.raw_total),
            discount=str(pricing.discount),
            total_amount=str(pricing.final_total),
            voucher_code=voucher.code if voucher else None,
        )

        current_domain.process(ClearCart(user_id=user_id, order_id=order_id), asynchronous=False)

        outcome = self.dispatcher.dispatch(get_order(order_id))
        return PlacementResult(order_id=order_id, outcome=outcome, pricing=pricing)


def create_order(user_id, line_items, address_id, payment_method, voucher_code=None) -> PlacementResult:
    return OrderPlacementService().create_order(
        user_id=user_id,
        line_items=line_items,
        address_id=address_id,
        payment_method=payment_method,
        voucher_code=voucher_code,
    )
