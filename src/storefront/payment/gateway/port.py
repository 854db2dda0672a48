"""Payment gateway port (abstract interface).

Defines the contracts gateway adapters implement:
- every gateway can execute (capture) a payment the customer approved
- redirect gateways (MoMo) hand back a URL the customer is sent to
- approval gateways (PayPal) create a payment the customer approves

Adapters report gateway-side failures through their result objects rather
than raising, so callers decide how a failure maps onto the order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

APPROVED = "approved"
# Execution state for a gateway that could not be reached or rejected the call
ERROR = "error"


@dataclass(frozen=True)
class RedirectResult:
    """Result of asking a redirect gateway for a pay URL."""

    success: bool
    pay_url: str | None = None
    gateway_reference: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class PaymentCreation:
    """Result of creating a payment that the customer must approve."""

    success: bool
    payment_id: str | None = None
    approval_url: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing (capturing) an approved payment."""

    state: str
    payment_id: str | None = None
    payer_id: str | None = None
    failure_reason: str | None = None

    @property
    def approved(self) -> bool:
        return self.state == APPROVED

    @property
    def errored(self) -> bool:
        return self.state == ERROR


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def execute_payment(self, payment_id: str, payer_id: str | None) -> ExecutionResult:
        """Finalize a payment the customer has approved on the gateway side."""
        ...


class RedirectGateway(PaymentGateway):
    @abstractmethod
    def create_redirect(
        self,
        amount: float,
        order_info: str,
        redirect_url: str,
        order_id: str,
    ) -> RedirectResult:
        """Request a pay URL for ``amount`` (in VND)."""
        ...


class ApprovalGateway(PaymentGateway):
    @abstractmethod
    def create_payment(
        self,
        amount: float,
        currency: str,
        description: str,
        return_url: str,
        cancel_url: str,
    ) -> PaymentCreation:
        """Create a payment and return the URL where the customer approves it."""
        ...
