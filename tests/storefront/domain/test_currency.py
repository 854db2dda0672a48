"""Tests for fixed-rate VND/USD conversion."""

from decimal import Decimal

import pytest
from storefront.exceptions import InvalidRequest
from storefront.payment.currency import convert, usd_to_vnd, vnd_to_usd


class TestConversion:
    def test_vnd_to_usd(self):
        assert vnd_to_usd(250000) == Decimal("10.00")

    def test_vnd_to_usd_rounds_to_cents(self):
        assert vnd_to_usd(123456) == Decimal("4.94")

    def test_usd_to_vnd(self):
        assert usd_to_vnd("1.50") == Decimal("37500.00")

    def test_same_currency_is_unchanged(self):
        assert convert(12.345, "usd", "USD") == Decimal("12.35")

    def test_unsupported_currency(self):
        with pytest.raises(InvalidRequest):
            convert(10, "EUR", "USD")
