"""Application tests for stock ledger and cart item commands."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart
from storefront.inventory.management import ChangePrice, RegisterProduct, Restock
from storefront.inventory.stock import ProductStock


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestStockLedgerCommands:
    def test_register_returns_product_id(self):
        product_id = _process(RegisterProduct(product_id="prod-new", title="Mug", price=55000.0, total_stock=4))
        assert product_id == "prod-new"

        stock = current_domain.repository_for(ProductStock).get("prod-new")
        assert stock.title == "Mug"
        assert stock.total_stock == 4

    def test_duplicate_registration_rejected(self, stock):
        stock("prod-dup")
        with pytest.raises(ValidationError):
            _process(RegisterProduct(product_id="prod-dup", total_stock=1))

    def test_restock_adds_units(self, stock, stock_level):
        stock("prod-r", total_stock=2)
        assert _process(Restock(product_id="prod-r", quantity=5)) == 7
        assert stock_level("prod-r") == 7

    def test_change_price(self, stock):
        stock("prod-p", price=10000.0)
        _process(ChangePrice(product_id="prod-p", price=12500.0))
        assert current_domain.repository_for(ProductStock).get("prod-p").price == 12500.0


class TestCartCommands:
    def test_add_creates_cart_and_merges_quantities(self):
        _process(AddToCart(user_id="user-c1", product_id="prod-a", quantity=1))
        _process(AddToCart(user_id="user-c1", product_id="prod-a", quantity=2))

        cart = current_domain.repository_for(ShoppingCart).get("user-c1")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_remove_item(self):
        _process(AddToCart(user_id="user-c2", product_id="prod-a", quantity=1))
        _process(AddToCart(user_id="user-c2", product_id="prod-b", quantity=1))

        _process(RemoveFromCart(user_id="user-c2", product_id="prod-a"))

        cart = current_domain.repository_for(ShoppingCart).get("user-c2")
        assert [str(item.product_id) for item in cart.items] == ["prod-b"]

    def test_remove_missing_item_rejected(self):
        _process(AddToCart(user_id="user-c3", product_id="prod-a", quantity=1))
        with pytest.raises(ValidationError):
            _process(RemoveFromCart(user_id="user-c3", product_id="prod-z"))

    def test_clear_reports_removed_lines(self):
        _process(AddToCart(user_id="user-c4", product_id="prod-a", quantity=1))
        _process(AddToCart(user_id="user-c4", product_id="prod-b", quantity=1))
        assert _process(ClearCart(user_id="user-c4", order_id="ord-1")) == 2

    def test_clear_without_cart_is_a_no_op(self):
        assert _process(ClearCart(user_id="user-none")) == 0
