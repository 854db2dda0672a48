"""Configurable fake payment gateway for development and testing.

Simulates both the MoMo redirect flow and the PayPal approve/execute flow
without any external calls. It can be configured at runtime to succeed,
fail, or report a non-approved execution state, and it records every call
for test assertions.
"""

from uuid import uuid4

from storefront.payment.gateway.port import (
    APPROVED,
    ERROR,
    ApprovalGateway,
    ExecutionResult,
    PaymentCreation,
    RedirectGateway,
    RedirectResult,
)


class FakeGateway(RedirectGateway, ApprovalGateway):
    """Configurable fake payment gateway."""

    def __init__(self, base_url: str = "https://pay.example.test") -> None:
        self.base_url = base_url.rstrip("/")
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.execution_state: str = APPROVED
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Gateway unavailable",
        execution_state: str = APPROVED,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.execution_state = execution_state

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def create_redirect(
        self,
        amount: float,
        order_info: str,
        redirect_url: str,
        order_id: str,
    ) -> RedirectResult:
        self.calls.append(
            {
                "method": "create_redirect",
                "amount": amount,
                "order_info": order_info,
                "redirect_url": redirect_url,
                "order_id": order_id,
            }
        )

        if not self.should_succeed:
            return RedirectResult(success=False, failure_reason=self.failure_reason)

        reference = f"fake_momo_{uuid4().hex[:12]}"
        return RedirectResult(
            success=True,
            pay_url=f"{self.base_url}/momo/{reference}",
            gateway_reference=reference,
        )

    def create_payment(
        self,
        amount: float,
        currency: str,
        description: str,
        return_url: str,
        cancel_url: str,
    ) -> PaymentCreation:
        self.calls.append(
            {
                "method": "create_payment",
                "amount": amount,
                "currency": currency,
                "description": description,
                "return_url": return_url,
                "cancel_url": cancel_url,
            }
        )

        if not self.should_succeed:
            return PaymentCreation(success=False, failure_reason=self.failure_reason)

        payment_id = f"PAYID-FAKE{uuid4().hex[:12].upper()}"
        return PaymentCreation(
            success=True,
            payment_id=payment_id,
            approval_url=f"{self.base_url}/paypal/approve?paymentId={payment_id}",
        )

    def execute_payment(self, payment_id: str, payer_id: str | None) -> ExecutionResult:
        self.calls.append(
            {
                "method": "execute_payment",
                "payment_id": payment_id,
                "payer_id": payer_id,
            }
        )

        if not self.should_succeed:
            return ExecutionResult(state=ERROR, payment_id=payment_id, failure_reason=self.failure_reason)
        return ExecutionResult(state=self.execution_state, payment_id=payment_id, payer_id=payer_id)
