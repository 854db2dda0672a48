"""Storefront bounded context: vouchers, stock, carts, orders and payments.

Turns a shopping cart into a priced, persisted order, reserves inventory,
routes the order to its payment method and reconciles asynchronous payment
captures. Orders and stock are standard CQRS aggregates (not event sourced).
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
