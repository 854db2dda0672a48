"""MoMo e-wallet gateway adapter (HTTP, via httpx).

Uses the MoMo "captureWallet" flow:
- ``create_redirect`` calls ``/v2/gateway/api/create`` and returns the payUrl
  the customer is redirected to
- ``execute_payment`` calls ``/v2/gateway/api/query`` to confirm that the
  transaction identified by ``payment_id`` (the MoMo orderId) was paid

Every request is signed with HMAC-SHA256 over the alphabetically ordered
``key=value`` pairs, using the partner's secret key.
"""

import hashlib
import hmac
import os
from uuid import uuid4

import httpx
import structlog

from storefront.payment.gateway.port import (
    APPROVED,
    ERROR,
    ExecutionResult,
    RedirectGateway,
    RedirectResult,
)

logger = structlog.get_logger(__name__)

_DEFAULT_ENDPOINT = "https://test-payment.momo.vn"
_CREATE_PATH = "/v2/gateway/api/create"
_QUERY_PATH = "/v2/gateway/api/query"

# MoMo result codes
_RESULT_SUCCESS = 0
_RESULT_PENDING = {1000, 7000, 7002}


class MomoGateway(RedirectGateway):
    """MoMo redirect gateway."""

    def __init__(
        self,
        partner_code: str,
        access_key: str,
        secret_key: str,
        ipn_url: str,
        endpoint: str = _DEFAULT_ENDPOINT,
        request_type: str = "captureWallet",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.partner_code = partner_code
        self.access_key = access_key
        self.secret_key = secret_key
        self.ipn_url = ipn_url
        self.request_type = request_type
        self._client = httpx.Client(
            base_url=endpoint.rstrip("/"),
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> "MomoGateway":
        return cls(
            partner_code=os.environ["MOMO_PARTNER_CODE"],
            access_key=os.environ["MOMO_ACCESS_KEY"],
            secret_key=os.environ["MOMO_SECRET_KEY"],
            ipn_url=os.environ.get("MOMO_IPN_URL", ""),
            endpoint=os.environ.get("MOMO_ENDPOINT", _DEFAULT_ENDPOINT),
        )

    def close(self) -> None:
        self._client.close()

    # ── Signing ─────────────────────────────────────────────────────

    def sign(self, fields: dict) -> str:
        raw = "&".join(f"{key}={fields[key]}" for key in sorted(fields))
        return hmac.new(self.secret_key.encode("utf-8"), raw.encode("utf-8"), hashlib.sha256).hexdigest()

    # ── Gateway operations ──────────────────────────────────────────

    def create_redirect(
        self,
        amount: float,
        order_info: str,
        redirect_url: str,
        order_id: str,
    ) -> RedirectResult:
        momo_order_id = f"{order_id}-{uuid4().hex[:8]}"
        signed = {
            "accessKey": self.access_key,
            "amount": int(round(amount)),
            "extraData": "",
            "ipnUrl": self.ipn_url,
            "orderId": momo_order_id,
            "orderInfo": order_info,
            "partnerCode": self.partner_code,
            "redirectUrl": redirect_url,
            "requestId": momo_order_id,
            "requestType": self.request_type,
        }
        payload = {key: value for key, value in signed.items() if key != "accessKey"}
        payload["signature"] = self.sign(signed)
        payload["lang"] = "en"

        try:
            response = self._client.post(_CREATE_PATH, json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("MoMo create request failed", order_id=order_id, error=str(exc))
            return RedirectResult(success=False, failure_reason=str(exc))

        if data.get("resultCode") != _RESULT_SUCCESS or not data.get("payUrl"):
            logger.warning(
                "MoMo refused payment creation",
                order_id=order_id,
                result_code=data.get("resultCode"),
                message=data.get("message"),
            )
            return RedirectResult(success=False, failure_reason=data.get("message") or "MoMo payment creation failed")

        return RedirectResult(success=True, pay_url=data["payUrl"], gateway_reference=momo_order_id)

    def execute_payment(self, payment_id: str, payer_id: str | None) -> ExecutionResult:
        request_id = uuid4().hex
        signed = {
            "accessKey": self.access_key,
            "orderId": payment_id,
            "partnerCode": self.partner_code,
            "requestId": request_id,
        }
        payload = {
            "partnerCode": self.partner_code,
            "requestId": request_id,
            "orderId": payment_id,
            "signature": self.sign(signed),
            "lang": "en",
        }

        try:
            response = self._client.post(_QUERY_PATH, json=payload)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("MoMo query request failed", payment_id=payment_id, error=str(exc))
            return ExecutionResult(state=ERROR, payment_id=payment_id, failure_reason=str(exc))

        result_code = data.get("resultCode")
        if result_code == _RESULT_SUCCESS:
            state = APPROVED
        elif result_code in _RESULT_PENDING:
            state = "pending"
        else:
            state = "failed"

        return ExecutionResult(
            state=state,
            payment_id=payment_id,
            payer_id=payer_id or str(data.get("transId") or "") or None,
            failure_reason=None if state == APPROVED else data.get("message"),
        )
