"""PayPal REST gateway adapter (HTTP, via httpx).

Implements the classic ``/v1/payments`` flow:
- ``create_payment`` creates a ``sale`` payment and returns its approval URL
- ``execute_payment`` executes it once the payer approved it

Access tokens come from the OAuth2 client-credentials grant and are cached
until shortly before they expire.
"""

import os
import time

import httpx
import structlog

from storefront.payment.gateway.port import (
    ERROR,
    ApprovalGateway,
    ExecutionResult,
    PaymentCreation,
)

logger = structlog.get_logger(__name__)

_ENDPOINTS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}
_TOKEN_PATH = "/v1/oauth2/token"
_PAYMENT_PATH = "/v1/payments/payment"


class PayPalGateway(ApprovalGateway):
    """PayPal approve/execute gateway."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        mode: str = "sandbox",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if mode not in _ENDPOINTS:
            raise ValueError(f"Unknown PayPal mode: {mode}")
        self.client_id = client_id
        self.client_secret = client_secret
        self.mode = mode
        self._client = httpx.Client(
            base_url=_ENDPOINTS[mode],
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._token: str | None = None
        self._token_expires_at: float = 0.0

    @classmethod
    def from_env(cls) -> "PayPalGateway":
        return cls(
            client_id=os.environ["PAYPAL_CLIENT_ID"],
            client_secret=os.environ["PAYPAL_CLIENT_SECRET"],
            mode=os.environ.get("PAYPAL_MODE", "sandbox"),
        )

    def close(self) -> None:
        self._client.close()

    # ── Auth ────────────────────────────────────────────────────────

    def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        response = self._client.post(
            _TOKEN_PATH,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        data = response.json()
        self._token = data["access_token"]
        # Refresh a minute early
        self._token_expires_at = time.monotonic() + max(int(data.get("expires_in", 0)) - 60, 0)
        return self._token

    def _post(self, path: str, payload: dict) -> httpx.Response:
        return self._client.post(
            path,
            json=payload,
            headers={"Authorization": f"Bearer {self._access_token()}"},
        )

    # ── Gateway operations ──────────────────────────────────────────

    def create_payment(
        self,
        amount: float,
        currency: str,
        description: str,
        return_url: str,
        cancel_url: str,
    ) -> PaymentCreation:
        payload = {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {"return_url": return_url, "cancel_url": cancel_url},
            "transactions": [
                {
                    "amount": {"total": f"{amount:.2f}", "currency": currency},
                    "description": description,
                }
            ],
        }

        try:
            response = self._post(_PAYMENT_PATH, payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.error("PayPal payment creation failed", error=str(exc))
            return PaymentCreation(success=False, failure_reason=str(exc))

        approval_url = next(
            (link["href"] for link in data.get("links", []) if link.get("rel") == "approval_url"),
            None,
        )
        if approval_url is None:
            return PaymentCreation(success=False, payment_id=data.get("id"), failure_reason="No approval URL returned")

        return PaymentCreation(success=True, payment_id=data["id"], approval_url=approval_url)

    def execute_payment(self, payment_id: str, payer_id: str | None) -> ExecutionResult:
        try:
            response = self._post(f"{_PAYMENT_PATH}/{payment_id}/execute", {"payer_id": payer_id})
            data = response.json()
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.error("PayPal execute request failed", payment_id=payment_id, error=str(exc))
            return ExecutionResult(state=ERROR, payment_id=payment_id, failure_reason=str(exc))

        if response.status_code >= 500:
            return ExecutionResult(state=ERROR, payment_id=payment_id, failure_reason=data.get("message"))

        return ExecutionResult(
            state=data.get("state", "failed"),
            payment_id=data.get("id", payment_id),
            payer_id=payer_id,
            failure_reason=data.get("message"),
        )
