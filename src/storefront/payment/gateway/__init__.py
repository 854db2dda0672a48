"""Payment gateway factory.

Provides get_gateway() / set_gateway() per payment method:
- FakeGateway for development and testing (PAYMENT_GATEWAY=fake, the default)
- MomoGateway and PayPalGateway over HTTP (PAYMENT_GATEWAY=live)
"""

import os

from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.port import PaymentGateway

GATEWAY_METHODS = ("momo", "paypal")

_current_gateways: dict[str, PaymentGateway] = {}


def _build_gateway(method: str) -> PaymentGateway:
    adapter = os.environ.get("PAYMENT_GATEWAY", "fake")
    if adapter == "fake":
        # One fake serves every method so tests can configure it once
        shared = next(iter(_current_gateways.values()), None)
        if isinstance(shared, FakeGateway):
            return shared
        return FakeGateway()
    if adapter == "live":
        if method == "momo":
            from storefront.payment.gateway.momo_adapter import MomoGateway

            return MomoGateway.from_env()

        from storefront.payment.gateway.paypal_adapter import PayPalGateway

        return PayPalGateway.from_env()
    raise ValueError(f"Unknown payment gateway adapter: {adapter}")


def get_gateway(method: str) -> PaymentGateway:
    """Return the gateway that owns ``method`` ("momo" or "paypal")."""
    if method not in GATEWAY_METHODS:
        raise ValueError(f"No payment gateway for method: {method}")
    if method not in _current_gateways:
        _current_gateways[method] = _build_gateway(method)
    return _current_gateways[method]


def set_gateway(gateway: PaymentGateway, method: str | None = None) -> None:
    """Override the active gateway for one method, or for all of them (useful for tests)."""
    for name in [method] if method else GATEWAY_METHODS:
        _current_gateways[name] = gateway


def reset_gateway() -> None:
    """Reset to default gateways."""
    _current_gateways.clear()
