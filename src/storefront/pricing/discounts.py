"""Pricing engine: raw totals and voucher discounts.

Money is computed with ``Decimal`` and quantized to cents. A voucher is
turned into an ordered list of discount policies that are folded over the
raw total; each policy sees the immutable base amount and returns the
discount it grants. New voucher types plug in by registering a policy
builder in ``POLICY_BUILDERS``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from storefront.exceptions import InvalidRequest, VoucherInvalid

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a float/str/int/Decimal into a cent-quantized Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone(UTC).replace(tzinfo=None)
    return moment


# ---------------------------------------------------------------------------
# Inputs and outputs
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PricedLine:
    product_id: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_dict(cls, data: dict) -> "PricedLine":
        quantity = int(data["quantity"])
        unit_price = to_money(data["unit_price"])
        if quantity <= 0:
            raise InvalidRequest(f"Quantity for product {data['product_id']} must be positive")
        if unit_price < ZERO:
            raise InvalidRequest(f"Unit price for product {data['product_id']} cannot be negative")
        return cls(product_id=str(data["product_id"]), quantity=quantity, unit_price=unit_price)


@dataclass(frozen=True)
class VoucherTerms:
    """Read-only snapshot of a voucher, as the pricing engine sees it."""

    code: str
    discount_type: str
    value: Decimal
    max_discount: Decimal | None = None
    min_order_amount: Decimal = ZERO
    is_active: bool = True
    expired_at: datetime | None = None

    def is_expired(self, as_of: datetime) -> bool:
        return self.expired_at is not None and _naive_utc(self.expired_at) < _naive_utc(as_of)


@dataclass(frozen=True)
class PriceBreakdown:
    raw_total: Decimal
    discount: Decimal
    final_total: Decimal

    def as_dict(self) -> dict:
        return {
            "raw_total": float(self.raw_total),
            "discount": float(self.discount),
            "final_total": float(self.final_total),
        }


# ---------------------------------------------------------------------------
# Discount policies
# ---------------------------------------------------------------------------
class DiscountPolicy(ABC):
    kind: str

    @abstractmethod
    def discount(self, base: Decimal) -> Decimal:
        """Discount granted on ``base``; never more than ``base`` itself."""
        ...


@dataclass(frozen=True)
class FixedDiscount(DiscountPolicy):
    amount: Decimal
    kind: str = "fixed"

    def discount(self, base: Decimal) -> Decimal:
        return min(self.amount, base)


@dataclass(frozen=True)
class PercentDiscount(DiscountPolicy):
    percent: Decimal
    cap: Decimal | None = None
    kind: str = "percent"

    def discount(self, base: Decimal) -> Decimal:
        amount = to_money(base * self.percent / Decimal(100))
        if self.cap is not None:
            amount = min(amount, self.cap)
        return min(amount, base)


POLICY_BUILDERS: dict[str, Callable[[VoucherTerms], DiscountPolicy]] = {
    "fixed": lambda terms: FixedDiscount(amount=terms.value),
    "percent": lambda terms: PercentDiscount(percent=terms.value, cap=terms.max_discount),
}


def register_policy(kind: str, builder: Callable[[VoucherTerms], DiscountPolicy]) -> None:
    """Register a policy builder for a new voucher type."""
    POLICY_BUILDERS[kind] = builder


def policies_for(terms: VoucherTerms) -> list[DiscountPolicy]:
    builder = POLICY_BUILDERS.get(terms.discount_type)
    if builder is None:
        raise VoucherInvalid(f"Unsupported voucher type: {terms.discount_type}")
    return [builder(terms)]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def raw_total(lines: Iterable[PricedLine]) -> Decimal:
    return to_money(sum((line.subtotal for line in lines), ZERO))


def check_eligibility(terms: VoucherTerms, base: Decimal, as_of: datetime | None = None) -> None:
    """Raise VoucherInvalid unless the voucher may be applied to ``base``."""
    as_of = as_of or datetime.now(UTC)
    if not terms.is_active or terms.is_expired(as_of):
        raise VoucherInvalid("Voucher is invalid or has expired", voucher_code=terms.code)
    if base < terms.min_order_amount:
        raise VoucherInvalid(
            f"Order total must be at least {terms.min_order_amount} to use this voucher",
            voucher_code=terms.code,
        )


def apply_policies(base: Decimal, policies: Iterable[DiscountPolicy]) -> Decimal:
    """Fold the policies over an immutable base and return the total discount."""
    discount = ZERO
    for policy in policies:
        discount += policy.discount(base)
    return min(to_money(discount), base)


def compute_total(
    lines: Iterable[PricedLine],
    voucher: VoucherTerms | None = None,
    as_of: datetime | None = None,
) -> PriceBreakdown:
    """Compute the raw total, the voucher discount and the final amount due."""
    lines = list(lines)
    base = raw_total(lines)

    if voucher is None:
        return PriceBreakdown(raw_total=base, discount=ZERO, final_total=base)

    check_eligibility(voucher, base, as_of)
    discount = apply_policies(base, policies_for(voucher))
    return PriceBreakdown(raw_total=base, discount=discount, final_total=base - discount)
