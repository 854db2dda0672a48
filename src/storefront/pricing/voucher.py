"""Voucher aggregate (CQRS): promotional discount codes.

Codes are case-insensitive: they are stored upper-cased and double as the
aggregate identity, so two vouchers can never share a code. The order
workflow only reads vouchers; they are managed through the commands in
``pricing.management``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from storefront.domain import storefront
from storefront.pricing.discounts import VoucherTerms, to_money


class VoucherType(Enum):
    PERCENT = "percent"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return code.strip().upper()


@storefront.aggregate
class Voucher:
    code = String(identifier=True, required=True, max_length=50)
    discount_type = String(choices=VoucherType, required=True)
    value = Float(required=True, min_value=0.0)
    max_discount = Float(min_value=0.0)  # percent vouchers only; empty means uncapped
    min_order_amount = Float(default=0.0, min_value=0.0)
    is_active = Boolean(default=True)
    expired_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def value_must_be_positive(self):
        if self.value is not None and self.value <= 0:
            raise ValidationError({"value": ["Voucher value must be greater than zero"]})

    @invariant.post
    def percent_cannot_exceed_hundred(self):
        if self.discount_type == VoucherType.PERCENT.value and self.value and self.value > 100:
            raise ValidationError({"value": ["Percent vouchers cannot exceed 100"]})

    @classmethod
    def create(
        cls,
        code,
        discount_type,
        value,
        max_discount=None,
        min_order_amount=0.0,
        expired_at=None,
    ):
        return cls(
            code=normalize_code(code),
            discount_type=discount_type,
            value=value,
            max_discount=max_discount,
            min_order_amount=min_order_amount or 0.0,
            is_active=True,
            expired_at=expired_at,
            created_at=datetime.now(UTC),
        )

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Voucher is already inactive"]})
        self.is_active = False

    def terms(self) -> VoucherTerms:
        """Snapshot handed to the pricing engine."""
        return VoucherTerms(
            code=self.code,
            discount_type=self.discount_type,
            value=to_money(self.value),
            max_discount=to_money(self.max_discount) if self.max_discount is not None else None,
            min_order_amount=to_money(self.min_order_amount or 0.0),
            is_active=bool(self.is_active),
            expired_at=self.expired_at,
        )
