"""Tests for the ProductStock aggregate: conditional decrement and release."""

import pytest
from protean.exceptions import ValidationError
from storefront.exceptions import InsufficientStock
from storefront.inventory.events import StockDepleted, StockRegistered, StockReleased, StockReserved
from storefront.inventory.stock import ProductStock


def _stock(total=5):
    stock = ProductStock.register(product_id="prod-001", total_stock=total, price=25000.0, title="Widget")
    return stock


class TestRegistration:
    def test_register(self):
        stock = _stock()
        assert stock.product_id == "prod-001"
        assert stock.total_stock == 5
        assert stock.price == 25000.0
        assert isinstance(stock._events[0], StockRegistered)


class TestReserve:
    def test_reserve_decrements(self):
        stock = _stock(5)
        stock.reserve(3, order_ref="order-1")
        assert stock.total_stock == 2
        reserved = [e for e in stock._events if isinstance(e, StockReserved)]
        assert reserved[0].quantity == 3
        assert reserved[0].remaining == 2

    def test_reserve_all_raises_depleted(self):
        stock = _stock(2)
        stock.reserve(2)
        assert stock.total_stock == 0
        assert any(isinstance(e, StockDepleted) for e in stock._events)

    def test_reserve_more_than_available_fails_without_change(self):
        stock = _stock(1)
        with pytest.raises(InsufficientStock) as exc:
            stock.reserve(2)
        assert exc.value.product_id == "prod-001"
        assert exc.value.requested == 2
        assert exc.value.available == 1
        assert stock.total_stock == 1

    def test_reserve_requires_positive_quantity(self):
        with pytest.raises(ValidationError):
            _stock().reserve(0)


class TestRelease:
    def test_release_restores(self):
        stock = _stock(5)
        stock.reserve(4)
        stock.release(4)
        assert stock.total_stock == 5
        assert any(isinstance(e, StockReleased) for e in stock._events)

    def test_restock(self):
        stock = _stock(0)
        stock.restock(10)
        assert stock.total_stock == 10

    def test_reprice_rejects_negative(self):
        with pytest.raises(ValidationError):
            _stock().reprice(-1)
