"""Application tests for voucher management commands."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.exceptions import VoucherInvalid
from storefront.pricing.management import DeactivateVoucher, find_voucher
from storefront.pricing.voucher import Voucher


class TestCreateVoucher:
    def test_create_returns_normalized_code(self, voucher):
        code = voucher("welcome", "fixed", 10000)
        assert code == "WELCOME"
        assert current_domain.repository_for(Voucher).get("WELCOME").value == 10000

    def test_codes_are_unique_case_insensitively(self, voucher):
        voucher("SALE", "percent", 10)
        with pytest.raises(ValidationError):
            voucher("sale", "fixed", 5000)


class TestFindVoucher:
    def test_lookup_is_case_insensitive(self, voucher):
        voucher("SALE10", "percent", 10, max_discount=5000)
        assert find_voucher("sale10").code == "SALE10"

    def test_unknown_code_is_invalid(self):
        with pytest.raises(VoucherInvalid):
            find_voucher("NOPE")


class TestDeactivateVoucher:
    def test_deactivate(self, voucher):
        voucher("GONE", "fixed", 1000)
        current_domain.process(DeactivateVoucher(code="gone"), asynchronous=False)
        assert current_domain.repository_for(Voucher).get("GONE").is_active is False
