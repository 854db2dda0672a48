"""Stock ledger management: register products, restock and reprice."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.stock import ProductStock

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ProductStock")
class RegisterProduct:
    product_id = Identifier(required=True)
    title = String(max_length=255)
    price = Float(default=0.0, min_value=0.0)
    total_stock = Integer(default=0, min_value=0)


@storefront.command(part_of="ProductStock")
class Restock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ProductStock")
class ChangePrice:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@storefront.command_handler(part_of=ProductStock)
class StockManagementHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        repo = current_domain.repository_for(ProductStock)
        if repo._dao.query.filter(product_id=command.product_id).all().items:
            raise ValidationError({"product_id": [f"Product {command.product_id} is already registered"]})

        stock = ProductStock.register(
            product_id=command.product_id,
            total_stock=command.total_stock or 0,
            price=command.price or 0.0,
            title=command.title,
        )
        repo.add(stock)
        logger.info("Product registered", product_id=str(command.product_id), total_stock=stock.total_stock)
        return str(stock.product_id)

    @handle(Restock)
    def restock(self, command):
        repo = current_domain.repository_for(ProductStock)
        stock = repo.get(command.product_id)
        stock.restock(command.quantity)
        repo.add(stock)
        return stock.total_stock

    @handle(ChangePrice)
    def change_price(self, command):
        repo = current_domain.repository_for(ProductStock)
        stock = repo.get(command.product_id)
        stock.reprice(command.price)
        repo.add(stock)
