"""Tests for the pricing engine: raw totals, voucher policies and eligibility."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from storefront.exceptions import InvalidRequest, VoucherInvalid
from storefront.pricing.discounts import (
    POLICY_BUILDERS,
    ZERO,
    DiscountPolicy,
    FixedDiscount,
    PercentDiscount,
    PricedLine,
    VoucherTerms,
    apply_policies,
    compute_total,
    policies_for,
    register_policy,
)


def _lines(*pairs):
    return [
        PricedLine(product_id=f"prod-{i}", quantity=quantity, unit_price=Decimal(str(price)))
        for i, (quantity, price) in enumerate(pairs)
    ]


def _percent(value, max_discount=None, **overrides):
    return VoucherTerms(
        code="PCT",
        discount_type="percent",
        value=Decimal(str(value)),
        max_discount=Decimal(str(max_discount)) if max_discount is not None else None,
        **overrides,
    )


def _fixed(value, **overrides):
    return VoucherTerms(code="FIX", discount_type="fixed", value=Decimal(str(value)), **overrides)


class TestRawTotal:
    def test_no_voucher_means_no_discount(self):
        result = compute_total(_lines((2, 25000), (1, 50000)))
        assert result.raw_total == Decimal("100000.00")
        assert result.discount == ZERO
        assert result.final_total == Decimal("100000.00")

    def test_line_subtotals_are_summed(self):
        result = compute_total(_lines((3, "19.99"), (2, "0.50")))
        assert result.raw_total == Decimal("60.97")

    def test_priced_line_rejects_non_positive_quantity(self):
        with pytest.raises(InvalidRequest):
            PricedLine.from_dict({"product_id": "p", "quantity": 0, "unit_price": 10})

    def test_priced_line_rejects_negative_price(self):
        with pytest.raises(InvalidRequest):
            PricedLine.from_dict({"product_id": "p", "quantity": 1, "unit_price": -1})


class TestPercentVoucher:
    def test_percent_discount_is_capped(self):
        result = compute_total(_lines((1, 100000)), _percent(10, max_discount=5000))
        assert result.discount == Decimal("5000.00")
        assert result.final_total == Decimal("95000.00")

    def test_percent_discount_below_cap(self):
        result = compute_total(_lines((1, 20000)), _percent(10, max_discount=5000))
        assert result.discount == Decimal("2000.00")
        assert result.final_total == Decimal("18000.00")

    def test_percent_without_cap(self):
        result = compute_total(_lines((1, 100000)), _percent(25))
        assert result.discount == Decimal("25000.00")


class TestFixedVoucher:
    def test_fixed_discount_never_exceeds_raw_total(self):
        result = compute_total(_lines((1, 15000)), _fixed(20000))
        assert result.discount == Decimal("15000.00")
        assert result.final_total == ZERO

    def test_fixed_discount(self):
        result = compute_total(_lines((2, 30000)), _fixed(10000))
        assert result.discount == Decimal("10000.00")
        assert result.final_total == Decimal("50000.00")


class TestEligibility:
    def test_below_minimum_order_amount_is_rejected(self):
        with pytest.raises(VoucherInvalid):
            compute_total(_lines((1, 30000)), _fixed(5000, min_order_amount=Decimal("50000")))

    def test_exactly_minimum_order_amount_is_accepted(self):
        result = compute_total(_lines((1, 50000)), _fixed(5000, min_order_amount=Decimal("50000")))
        assert result.final_total == Decimal("45000.00")

    def test_expired_voucher_is_rejected(self):
        expired = datetime.now(UTC) - timedelta(days=1)
        with pytest.raises(VoucherInvalid):
            compute_total(_lines((1, 1_000_000)), _fixed(5000, expired_at=expired))

    def test_inactive_voucher_is_rejected(self):
        with pytest.raises(VoucherInvalid):
            compute_total(_lines((1, 1_000_000)), _percent(10, is_active=False))

    def test_future_expiry_is_accepted(self):
        later = datetime.now(UTC) + timedelta(days=1)
        result = compute_total(_lines((1, 10000)), _fixed(1000, expired_at=later))
        assert result.discount == Decimal("1000.00")

    def test_naive_expiry_compared_as_utc(self):
        as_of = datetime(2026, 1, 2, 12, 0, tzinfo=UTC)
        terms = _fixed(1000, expired_at=datetime(2026, 1, 2, 11, 0))
        with pytest.raises(VoucherInvalid):
            compute_total(_lines((1, 10000)), terms, as_of=as_of)


class TestPolicies:
    def test_policies_see_the_same_base(self):
        base = Decimal("100.00")
        discount = apply_policies(base, [FixedDiscount(amount=Decimal("10")), PercentDiscount(percent=Decimal("10"))])
        assert discount == Decimal("20.00")

    def test_folded_discount_never_exceeds_base(self):
        base = Decimal("10.00")
        discount = apply_policies(base, [FixedDiscount(amount=Decimal("8")), FixedDiscount(amount=Decimal("8"))])
        assert discount == base

    def test_unknown_voucher_type_is_rejected(self):
        with pytest.raises(VoucherInvalid):
            policies_for(VoucherTerms(code="X", discount_type="bogus", value=Decimal("1")))

    def test_new_voucher_type_can_be_registered(self):
        class HalfOff(DiscountPolicy):
            kind = "half"

            def discount(self, base):
                return base / 2

        register_policy("half", lambda terms: HalfOff())
        try:
            result = compute_total(
                _lines((1, 80)),
                VoucherTerms(code="HALF", discount_type="half", value=Decimal("1")),
            )
            assert result.final_total == Decimal("40.00")
        finally:
            POLICY_BUILDERS.pop("half")
