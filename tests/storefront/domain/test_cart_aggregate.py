"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartCleared


class TestCartItems:
    def test_add_item(self):
        cart = ShoppingCart.create(user_id="user-001")
        cart.add_item("prod-001", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_adding_same_product_increases_quantity(self):
        cart = ShoppingCart.create(user_id="user-001")
        cart.add_item("prod-001", 2)
        cart.add_item("prod-001", 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_remove_missing_item_fails(self):
        cart = ShoppingCart.create(user_id="user-001")
        with pytest.raises(ValidationError):
            cart.remove_item("prod-404")


class TestCartClear:
    def test_clear_empties_cart(self):
        cart = ShoppingCart.create(user_id="user-001")
        cart.add_item("prod-001", 1)
        cart.add_item("prod-002", 1)
        cart._events.clear()

        removed = cart.clear(order_id="order-1")

        assert removed == 2
        assert len(cart.items) == 0
        assert cart.cleared_at is not None
        assert isinstance(cart._events[0], CartCleared)
        assert cart._events[0].items_removed == 2
