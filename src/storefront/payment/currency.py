"""Fixed-rate VND/USD conversion for gateways that cannot charge in VND."""

from decimal import Decimal

from storefront.exceptions import InvalidRequest
from storefront.pricing.discounts import to_money

USD_TO_VND = Decimal("25000")
VND_TO_USD = Decimal("1") / USD_TO_VND

SUPPORTED_CURRENCIES = ("USD", "VND")


def validate_currency(currency: str) -> str:
    code = (currency or "").upper()
    if code not in SUPPORTED_CURRENCIES:
        raise InvalidRequest(f"Unsupported currency: {currency}", supported=list(SUPPORTED_CURRENCIES))
    return code


def convert(amount, from_currency: str, to_currency: str) -> Decimal:
    source = validate_currency(from_currency)
    target = validate_currency(to_currency)
    value = Decimal(str(amount))
    if source == target:
        return to_money(value)
    if source == "VND":
        return to_money(value * VND_TO_USD)
    return to_money(value * USD_TO_VND)


def vnd_to_usd(amount) -> Decimal:
    return convert(amount, "VND", "USD")


def usd_to_vnd(amount) -> Decimal:
    return convert(amount, "USD", "VND")
