"""Order payment and reservation bookkeeping: commands and handler.

These commands only record facts on the order (a redirect URL was issued,
a payment was captured, stock was reserved or released). Talking to the
gateways and the stock ledger is done by ``payment.dispatch``,
``payment.capture`` and the Inventory Adjuster.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class RecordPayUrl:
    order_id = Identifier(required=True)
    pay_url = String(required=True, max_length=2048)


@storefront.command(part_of="Order")
class RecordPaymentCapture:
    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=255)
    payer_id = String(max_length=255)


@storefront.command(part_of="Order")
class RecordStockReservation:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class RecordStockRelease:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(RecordPayUrl)
    def record_pay_url(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_pay_url(command.pay_url)
        repo.add(order)

    @handle(RecordPaymentCapture)
    def record_payment_capture(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_paid(payment_id=command.payment_id, payer_id=command.payer_id)
        repo.add(order)

    @handle(RecordStockReservation)
    def record_stock_reservation(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_stock_reserved()
        repo.add(order)

    @handle(RecordStockRelease)
    def record_stock_release(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_stock_released()
        repo.add(order)
