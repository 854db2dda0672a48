"""Error taxonomy for the order workflow.

Each error carries the HTTP status it maps to at the API boundary and a
human-readable message. ``details`` holds extra fields merged into the
response body (for example the id of an order left in draft state).
"""


class StorefrontError(Exception):
    """Base class for all order workflow errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, error: str | None = None, **details) -> None:
        self.message = message or self.default_message
        self.error = error
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.error:
            body["error"] = self.error
        body.update(self.details)
        return body


class InvalidRequest(StorefrontError):
    status_code = 400
    default_message = "Missing required fields"


class VoucherInvalid(StorefrontError):
    status_code = 400
    default_message = "Voucher cannot be applied"


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Order not found"


class InsufficientStock(StorefrontError):
    status_code = 409
    default_message = "Insufficient stock"

    def __init__(self, product_id: str, requested: int, available: int, message: str | None = None) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            message or f"Insufficient stock for product {product_id}",
            product_id=product_id,
            requested=requested,
            available=available,
        )


class InvalidStatusTransition(StorefrontError):
    status_code = 409
    default_message = "Invalid order status transition"

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition order from {current} to {target}")


class PaymentNotApproved(StorefrontError):
    status_code = 402
    default_message = "Payment not approved"


class GatewayError(StorefrontError):
    status_code = 500
    default_message = "Payment gateway failure"
